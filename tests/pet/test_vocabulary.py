from __future__ import annotations

from datetime import timedelta

from pixelpet.core.pet.models import Vocabulary
from pixelpet.core.pet.vocabulary import VocabularyStore


def test_ingest_reports_new_words(t0) -> None:
    store = VocabularyStore(Vocabulary())
    learned = store.ingest("Hello little buddy", "conversation", t0)
    assert learned == ["hello", "little", "buddy"]
    assert store.vocabulary.total_words_learned == 3
    assert len(store) == 3


def test_ingest_same_text_twice(t0) -> None:
    store = VocabularyStore(Vocabulary())
    first = store.ingest("good boy good", "conversation", t0)
    assert first == ["good", "boy"]
    assert store.get("good").usage_count == 2

    second = store.ingest("good boy good", "conversation", t0)
    assert second == []
    assert store.vocabulary.total_words_learned == 2
    assert store.get("good").usage_count == 4
    assert store.get("boy").usage_count == 2


def test_ingest_unions_context(t0) -> None:
    store = VocabularyStore(Vocabulary())
    store.ingest("pizza", "conversation", t0)
    store.ingest("pizza", "food", t0)
    store.ingest("pizza", "food", t0)
    assert store.get("pizza").context == ["conversation", "food"]


def test_lookup_is_case_insensitive(t0) -> None:
    store = VocabularyStore(Vocabulary())
    store.ingest("Pizza", "conversation", t0)
    assert "PIZZA" in store
    assert store.get("pIzZa").word == "pizza"


def test_words_are_classified(t0) -> None:
    store = VocabularyStore(Vocabulary())
    store.ingest("awesome snack", "conversation", t0)
    assert store.get("awesome").category == "praise"
    assert store.get("awesome").sentiment == "positive"
    assert store.get("snack").category == "food"


def test_favorites_capped_and_sorted(t0) -> None:
    store = VocabularyStore(Vocabulary())
    words = [f"word{i:02d}" for i in range(15)]
    store.ingest(" ".join(words), "conversation", t0)
    store.ingest("word14 word14 word13", "conversation", t0)

    favorites = store.vocabulary.favorite_words
    assert len(favorites) == 10
    assert favorites[:2] == ["word14", "word13"]
    counts = [store.get(w).usage_count for w in favorites]
    assert counts == sorted(counts, reverse=True)


def test_favorites_ties_keep_discovery_order(t0) -> None:
    store = VocabularyStore(Vocabulary())
    store.ingest("zebra apple mango", "conversation", t0)
    assert store.vocabulary.favorite_words == ["zebra", "apple", "mango"]


def test_store_wraps_existing_words(t0) -> None:
    vocabulary = Vocabulary()
    VocabularyStore(vocabulary).ingest("hello there", "conversation", t0)
    store = VocabularyStore(vocabulary)
    assert store.ingest("hello", "conversation", t0) == []
    assert store.get("hello").usage_count == 2


def test_set_user_name_ignores_blank() -> None:
    store = VocabularyStore(Vocabulary())
    store.set_user_name("  ")
    assert store.vocabulary.user_name is None
    store.set_user_name("Sam")
    assert store.vocabulary.user_name == "Sam"


def test_queries(t0) -> None:
    store = VocabularyStore(Vocabulary())
    store.ingest("love hate pizza", "conversation", t0)
    store.ingest("pizza pizza pizza", "food", t0 + timedelta(hours=30))

    assert [w.word for w in store.by_sentiment("positive")] == ["love"]
    assert [w.word for w in store.by_sentiment("negative")] == ["hate"]
    assert [w.word for w in store.by_category("praise")] == ["love"]
    assert [w.word for w in store.in_context("food")] == ["pizza"]
    assert [w.word for w in store.frequent()] == ["pizza"]
    assert store.recent(t0 + timedelta(hours=30)) == []
    assert len(store.recent(t0 + timedelta(hours=1))) == 3
