"""
Vocabulary-based WordPiece tokenization.

Used when no serialized tokenizer definition can be loaded, or when the
native tokenizer fails on an input. Text is split on whitespace and
punctuation; CJK runs are looked up whole before being broken into single
characters; other words are looked up whole before greedy longest-match
subword splitting.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from ...shared import get_logger
from ...shared.utils import basic_segments, split_cjk_runs

UNK_TOKEN = "[UNK]"
CLS_TOKEN = "[CLS]"
SEP_TOKEN = "[SEP]"
CONTINUATION_PREFIX = "##"
MAX_INPUT_CHARS_PER_WORD = 100

logger = get_logger(__name__)


class Vocabulary:
    """Flat token → id table."""

    def __init__(self, token_to_id: Dict[str, int]):
        self.token_to_id = dict(token_to_id)
        self.id_to_token = {idx: token for token, idx in self.token_to_id.items()}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Vocabulary":
        """
        Load a ``vocab.txt`` file: one token per line, id = line number.

        Blank lines keep their id slot but add no token.
        """
        token_to_id: Dict[str, int] = {}
        with open(path, "r", encoding="utf-8") as handle:
            for index, line in enumerate(handle):
                token = line.rstrip("\r\n")
                if token and token not in token_to_id:
                    token_to_id[token] = index
        return cls(token_to_id)

    @classmethod
    def from_tokenizer_json(cls, path: Union[str, Path]) -> Optional["Vocabulary"]:
        """
        Extract the WordPiece table embedded in a serialized tokenizer.

        Returns:
            Vocabulary, or None if the file has no usable WordPiece table
        """
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)

        model = data.get("model") or {}
        vocab = model.get("vocab")
        if model.get("type") not in (None, "WordPiece") or not isinstance(vocab, dict):
            return None
        return cls({str(token): int(idx) for token, idx in vocab.items()})

    def get(self, token: str) -> Optional[int]:
        return self.token_to_id.get(token)

    def __contains__(self, token: str) -> bool:
        return token in self.token_to_id

    def __len__(self) -> int:
        return len(self.token_to_id)


@dataclass
class WordPieceEncoding:
    """Pieces and ids for one text, markers included."""
    tokens: List[str] = field(default_factory=list)
    ids: List[int] = field(default_factory=list)
    unk_ratio: float = 0.0


class WordPieceEncoder:
    """
    Greedy longest-match WordPiece encoder.

    An unmatched character span produces one ``[UNK]`` and the scan resumes
    one character later, so a single bad word never aborts the input.
    """

    def __init__(self,
                 vocab: Vocabulary,
                 lowercase: bool = True,
                 model_max_length: int = 512,
                 continuation_prefix: str = CONTINUATION_PREFIX,
                 max_input_chars_per_word: int = MAX_INPUT_CHARS_PER_WORD):
        self.vocab = vocab
        self.lowercase = lowercase
        self.model_max_length = model_max_length
        self.continuation_prefix = continuation_prefix
        self.max_input_chars_per_word = max_input_chars_per_word

        self.unk_token = UNK_TOKEN
        self.cls_token = CLS_TOKEN if CLS_TOKEN in vocab else None
        self.sep_token = SEP_TOKEN if SEP_TOKEN in vocab else None
        self.has_unk = UNK_TOKEN in vocab

        if not self.has_unk:
            logger.warning("Vocabulary has no [UNK] entry; unknown pieces will be dropped")

    def tokenize(self, text: str) -> List[str]:
        """Split text into WordPiece pieces without begin/end markers."""
        if self.lowercase:
            text = text.lower()

        pieces: List[str] = []
        for segment in basic_segments(text):
            for run, is_cjk in split_cjk_runs(segment):
                if is_cjk:
                    pieces.extend(self._tokenize_cjk_run(run))
                else:
                    pieces.extend(self._tokenize_word(run))
        return pieces

    def encode(self, text: str, max_tokens: int) -> WordPieceEncoding:
        """
        Encode text into ids bounded by ``min(max_tokens, model_max_length)``.

        Truncation drops whole pieces from the end of the body and keeps the
        ``[CLS]``/``[SEP]`` markers when the vocabulary defines them.
        """
        limit = min(max_tokens, self.model_max_length)
        if limit <= 0 or not text or not text.strip():
            return WordPieceEncoding()

        pieces = self.tokenize(text)
        if not pieces:
            return WordPieceEncoding()

        unk_count = sum(1 for piece in pieces if piece == self.unk_token)
        unk_ratio = unk_count / len(pieces)

        if not self.has_unk:
            pieces = [piece for piece in pieces if piece != self.unk_token]

        prefix = [self.cls_token] if self.cls_token else []
        suffix = [self.sep_token] if self.sep_token else []
        body_limit = max(0, limit - len(prefix) - len(suffix))

        tokens = (prefix + pieces[:body_limit] + suffix)[:limit]
        ids = [self.vocab.token_to_id[token] for token in tokens]

        return WordPieceEncoding(tokens=tokens, ids=ids, unk_ratio=unk_ratio)

    def _tokenize_cjk_run(self, run: str) -> List[str]:
        if run in self.vocab:
            return [run]
        return [char if char in self.vocab else self.unk_token for char in run]

    def _tokenize_word(self, word: str) -> List[str]:
        if word in self.vocab:
            return [word]
        if len(word) > self.max_input_chars_per_word:
            return [self.unk_token]

        pieces: List[str] = []
        start = 0
        in_unknown_span = False

        while start < len(word):
            end = len(word)
            match = None
            while start < end:
                candidate = word[start:end]
                if start > 0:
                    candidate = self.continuation_prefix + candidate
                if candidate in self.vocab:
                    match = candidate
                    break
                end -= 1

            if match is None:
                if not in_unknown_span:
                    pieces.append(self.unk_token)
                in_unknown_span = True
                start += 1
                continue

            pieces.append(match)
            in_unknown_span = False
            start = end

        return pieces
