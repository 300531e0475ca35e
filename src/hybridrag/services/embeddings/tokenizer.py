"""
Tokenizer with graceful degradation.

The strategy is chosen once, at construction:

1. ``native``: a serialized ``tokenizer.json`` loaded with HuggingFace
   ``tokenizers``
2. ``wordpiece``: a vocabulary from ``vocab.txt`` (or the table embedded
   in ``tokenizer.json``) fed to :class:`WordPieceEncoder`
3. ``empty``: nothing usable was found; every text tokenizes to nothing

If the native tokenizer raises on a particular input, that call falls
through to WordPiece (or to empty output) without changing the strategy.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from tokenizers import Tokenizer

from ...shared import Settings, get_logger, get_settings
from ...shared.exceptions import ValidationError
from .model_resolver import resolve_model_info
from .models import EmbeddingModelInfo, TokenDebugInfo, TokenizedInput, TokenizerStrategy
from .wordpiece import Vocabulary, WordPieceEncoder


@dataclass
class _Encoded:
    tokens: List[str] = field(default_factory=list)
    ids: List[int] = field(default_factory=list)
    attention_mask: List[int] = field(default_factory=list)
    type_ids: List[int] = field(default_factory=list)
    unk_ratio: float = 0.0
    used_native: bool = False
    strategy: TokenizerStrategy = TokenizerStrategy.EMPTY

    def to_input(self) -> TokenizedInput:
        return TokenizedInput(
            input_ids=tuple(self.ids),
            attention_mask=tuple(self.attention_mask),
            token_type_ids=tuple(self.type_ids),
        )


class EmbeddingTokenizer:
    """
    Turns text into model-ready ids, masks and segment ids.

    Safe to share across threads: no per-call state is kept on the instance.
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 model_info: Optional[EmbeddingModelInfo] = None):
        self.settings = settings or get_settings()
        self.model_info = model_info or resolve_model_info(self.settings)
        self.logger = get_logger(__name__)

        self.max_length = self.model_info.max_token_length
        self._native: Optional[Tokenizer] = self._load_native()
        self._wordpiece: Optional[WordPieceEncoder] = self._load_wordpiece()

        if self._native is not None:
            self.strategy = TokenizerStrategy.NATIVE
            self.logger.info(f"Tokenizer strategy: native ({self.model_info.tokenizer_file_path})")
        elif self._wordpiece is not None:
            self.strategy = TokenizerStrategy.WORDPIECE
            self.logger.info(f"Tokenizer strategy: wordpiece ({len(self._wordpiece.vocab)} tokens)")
        else:
            self.strategy = TokenizerStrategy.EMPTY
            self.logger.warning(
                f"No tokenizer resources found in {self.model_info.model_directory}; "
                "all inputs will tokenize to empty"
            )

    # === Loading ===

    def _load_native(self) -> Optional[Tokenizer]:
        if not self.model_info.has_tokenizer_file:
            return None
        path = self.model_info.tokenizer_file_path
        try:
            native = Tokenizer.from_file(str(path))
        except Exception as e:
            self.logger.warning(f"Failed to load tokenizer definition {path}: {e}")
            return None

        # Budget and batch padding are applied here, not by the definition
        native.no_padding()
        native.no_truncation()
        return native

    def _load_wordpiece(self) -> Optional[WordPieceEncoder]:
        vocab = None

        if self.model_info.has_vocab_file:
            try:
                vocab = Vocabulary.from_file(self.model_info.vocab_file_path)
            except (OSError, UnicodeDecodeError) as e:
                self.logger.warning(f"Failed to read vocabulary {self.model_info.vocab_file_path}: {e}")

        if vocab is None and self.model_info.has_tokenizer_file:
            try:
                vocab = Vocabulary.from_tokenizer_json(self.model_info.tokenizer_file_path)
            except (OSError, ValueError) as e:
                self.logger.debug(f"No vocabulary table in {self.model_info.tokenizer_file_path}: {e}")

        if not vocab:
            return None

        return WordPieceEncoder(
            vocab,
            lowercase=self.settings.lowercase,
            model_max_length=self.max_length,
        )

    # === Public API ===

    @property
    def uses_native(self) -> bool:
        return self.strategy == TokenizerStrategy.NATIVE

    def tokenize(self, text: str, max_tokens: Optional[int] = None) -> TokenizedInput:
        """
        Tokenize one text.

        Args:
            text: Input text
            max_tokens: Token budget (defaults to the model max length)

        Returns:
            TokenizedInput; empty for blank text or a non-positive budget
        """
        return self._encode(text, max_tokens).to_input()

    def tokenize_batch(self, texts: List[str], max_tokens: Optional[int] = None) -> List[TokenizedInput]:
        """Tokenize several texts, preserving order."""
        if texts is None:
            raise ValidationError("texts must not be None")
        return [self.tokenize(text, max_tokens) for text in texts]

    def debug_tokenize(self, text: str, max_tokens: Optional[int] = None) -> TokenDebugInfo:
        """Tokenize and report token strings, ids and the unknown-piece ratio."""
        encoded = self._encode(text, max_tokens)
        return TokenDebugInfo(
            original=text,
            tokens=encoded.tokens,
            ids=encoded.ids,
            unk_ratio=encoded.unk_ratio,
            used_native=encoded.used_native,
            strategy=encoded.strategy,
        )

    # === Encoding ===

    def _encode(self, text: str, max_tokens: Optional[int]) -> _Encoded:
        if text is None:
            raise ValidationError("text must not be None")

        limit = self.max_length if max_tokens is None else min(max_tokens, self.max_length)
        if limit <= 0 or not text.strip():
            return _Encoded(strategy=self.strategy)

        if self._native is not None:
            try:
                return self._encode_native(text, limit)
            except Exception as e:
                self.logger.warning(f"Native tokenizer failed, falling back for this input: {e}")

        if self._wordpiece is not None:
            encoding = self._wordpiece.encode(text, limit)
            return _Encoded(
                tokens=encoding.tokens,
                ids=encoding.ids,
                attention_mask=[1] * len(encoding.ids),
                type_ids=[0] * len(encoding.ids),
                unk_ratio=encoding.unk_ratio,
                strategy=TokenizerStrategy.WORDPIECE,
            )

        return _Encoded(strategy=TokenizerStrategy.EMPTY)

    def _encode_native(self, text: str, limit: int) -> _Encoded:
        encoding = self._native.encode(text)

        tokens = list(encoding.tokens)
        ids = list(encoding.ids)
        mask = list(encoding.attention_mask)
        type_ids = list(encoding.type_ids)
        special = list(encoding.special_tokens_mask)

        if len(ids) > limit:
            # Keep a trailing special token ([SEP]) when there is room for it
            if special and special[-1] and limit >= 2:
                keep = list(range(limit - 1)) + [len(ids) - 1]
            else:
                keep = list(range(limit))
            tokens = [tokens[i] for i in keep]
            ids = [ids[i] for i in keep]
            mask = [mask[i] for i in keep]
            type_ids = [type_ids[i] for i in keep]
            special = [special[i] for i in keep]

        unk_token = getattr(self._native.model, "unk_token", None)
        pieces = [token for token, is_special in zip(tokens, special) if not is_special]
        unk_ratio = 0.0
        if pieces and unk_token:
            unk_ratio = sum(1 for token in pieces if token == unk_token) / len(pieces)

        return _Encoded(
            tokens=tokens,
            ids=ids,
            attention_mask=mask,
            type_ids=type_ids,
            unk_ratio=unk_ratio,
            used_native=True,
            strategy=TokenizerStrategy.NATIVE,
        )
