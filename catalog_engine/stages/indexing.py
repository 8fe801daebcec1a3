"""
Content Indexer.

Builds lookup tables (by id, by category, by keyword) over the frozen
registry. Batch index: rebuilt per snapshot, no incremental updates.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from catalog_engine.models.topic import Topic
from catalog_engine.utils.tokenizer import WORD_RE, normalize_phrase, token_set, tokenize

logger = logging.getLogger(__name__)


# (exact title, title hit, title overlap, body overlap)
Score = Tuple[int, int, int, int]


class CatalogIndex:
    """
    Read-only lookup structure over an ordered topic sequence.

    Search ranking:
    1. Exact title match
    2. Title match (shared token, or query is a substring of the title)
    3. Summary / key point match
    Within a tier more shared tokens rank higher; remaining ties keep
    registry order.
    """

    def __init__(self, topics: Iterable[Topic]):
        self.topics: List[Topic] = list(topics)
        self._position: Dict[str, int] = {}
        self._by_id: Dict[str, Topic] = {}
        self._by_category: Dict[str, List[Topic]] = {}  # first-appearance order
        self._title_tokens: Dict[str, Set[str]] = {}
        self._title_phrase: Dict[str, str] = {}
        self._title_lower: Dict[str, str] = {}
        self._body_tokens: Dict[str, Set[str]] = {}

        for position, topic in enumerate(self.topics):
            self._position[topic.id] = position
            self._by_id[topic.id] = topic
            self._by_category.setdefault(topic.category, []).append(topic)

            self._title_tokens[topic.id] = set(tokenize(topic.title))
            self._title_phrase[topic.id] = normalize_phrase(topic.title)
            self._title_lower[topic.id] = topic.title.lower()
            self._body_tokens[topic.id] = token_set([topic.summary, *topic.key_points])

        logger.info(
            f"Built index: {len(self.topics)} topics, "
            f"{len(self._by_category)} categories, "
            f"{len(self._all_tokens())} search tokens"
        )

    def get(self, topic_id: str) -> Optional[Topic]:
        """Lookup by id. Returns None if not found."""
        return self._by_id.get(topic_id)

    def by_category(self, tag: str) -> List[Topic]:
        """Topics of one category, in registry order. Empty for unknown tags."""
        return list(self._by_category.get(tag, []))

    def categories(self) -> List[Tuple[str, int]]:
        """(tag, topic count) for every category present, in first-appearance order."""
        return [(tag, len(topics)) for tag, topics in self._by_category.items()]

    def search(self, query: str, limit: Optional[int] = None) -> List[Topic]:
        """
        Rank topics against a keyword query.

        Args:
            query: Free text; tokenized the same way as topic text
            limit: Optional maximum number of results

        Returns:
            Matching topics, best first. A blank query (or one made only of
            stop words) returns every topic in registry order. A query with
            no words at all, such as "++", matches nothing.
        """
        query_tokens = set(tokenize(query or ""))
        if not query_tokens:
            if query and query.strip() and not WORD_RE.search(query.lower()):
                return []
            results = list(self.topics)
            return results[:limit] if limit is not None else results

        phrase = normalize_phrase(query)
        raw = query.strip().lower()

        scored = []
        for topic in self.topics:
            score = self._score(topic, query_tokens, phrase, raw)
            if score is not None:
                scored.append((score, self._position[topic.id], topic))

        scored.sort(key=lambda item: (
            -item[0][0], -item[0][1], -item[0][2], -item[0][3], item[1]
        ))
        results = [topic for _, _, topic in scored]

        logger.debug(f"Search '{query}': {len(results)} matches")
        return results[:limit] if limit is not None else results

    def _score(self, topic: Topic, query_tokens: Set[str], phrase: str, raw: str) -> Optional[Score]:
        title_overlap = len(query_tokens & self._title_tokens[topic.id])
        body_overlap = len(query_tokens & self._body_tokens[topic.id])

        exact = int(phrase == self._title_phrase[topic.id])
        title_hit = int(exact or title_overlap > 0 or raw in self._title_lower[topic.id])

        if not title_hit and body_overlap == 0:
            return None
        return exact, title_hit, title_overlap, body_overlap

    def _all_tokens(self) -> Set[str]:
        tokens: Set[str] = set()
        for topic_id in self._by_id:
            tokens |= self._title_tokens[topic_id]
            tokens |= self._body_tokens[topic_id]
        return tokens

    def to_dict(self) -> dict:
        """
        Serialize the category map and search token table.

        Token table: token -> {"title": [ids], "body": [ids]}, tokens sorted,
        ids in registry order. Deterministic for a given topic sequence.
        """
        search_table = {}
        for token in sorted(self._all_tokens()):
            search_table[token] = {
                "title": [t.id for t in self.topics if token in self._title_tokens[t.id]],
                "body": [t.id for t in self.topics if token in self._body_tokens[t.id]],
            }

        return {
            "categories": {
                tag: [t.id for t in topics] for tag, topics in self._by_category.items()
            },
            "search": search_table,
        }


def build_index(topics: Iterable[Topic]) -> CatalogIndex:
    """Build a CatalogIndex in one pass over the registry."""
    return CatalogIndex(topics)
