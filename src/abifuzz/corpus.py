import logging
from typing import Iterable, Iterator, List, Union

from abifuzz.exceptions import InvalidWord
from abifuzz.types import Address

logger = logging.getLogger(__name__)

WORD_SIZE = 32


class WordCorpus:
    """
    Ordered, append-only collection of 32-byte words seen during execution.

    Strategies built against the corpus capture its length once and only ever
    index below that length, so entries are never removed or reordered.
    Duplicate words are dropped on insertion.
    """

    def __init__(self, words: Iterable[bytes] = (), log_every: int = 1_000):
        self.log_every = log_every

        self._words: List[bytes] = []
        self._seen: set = set()

        for word in words:
            self.add(word)

    def add(self, word: bytes) -> bool:
        """Append a word. Returns False if it was already present."""
        if not isinstance(word, (bytes, bytearray)) or len(word) != WORD_SIZE:
            raise InvalidWord(f"Expected a {WORD_SIZE}-byte word, got {word!r}")
        word = bytes(word)
        if word in self._seen:
            return False

        self._seen.add(word)
        self._words.append(word)

        if self.log_every and len(self._words) % self.log_every == 0:
            logger.info(f"Word corpus grew to {len(self._words)} entries")
        return True

    def add_int(self, value: int) -> bool:
        # negative values are stored as their two's complement word
        return self.add((value % 2**256).to_bytes(WORD_SIZE, "big"))

    def add_address(self, address: Union[str, bytes]) -> bool:
        canonical = Address(address).canonical_address
        return self.add(canonical.rjust(WORD_SIZE, b"\x00"))

    def add_bytes(self, data: bytes) -> int:
        """
        Split `data` (e.g. return data or log topics/data) into words and add
        them. The trailing partial word is right-padded with zeroes.
        Returns the number of new words.
        """
        added = 0
        for ofst in range(0, len(data), WORD_SIZE):
            chunk = data[ofst : ofst + WORD_SIZE].ljust(WORD_SIZE, b"\x00")
            added += self.add(chunk)
        return added

    def __len__(self) -> int:
        return len(self._words)

    def __getitem__(self, index: int) -> bytes:
        return self._words[index]

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._words)

    def __contains__(self, word) -> bool:
        return word in self._seen
