"""
Model resource resolution.

Models are expected in a single directory (by default
``models/all-MiniLM-L6-v2``) holding ``model.onnx``, ``tokenizer.json``
and ``vocab.txt``. Missing files are not an error here: the tokenizer and
provider pick their fallback strategies from what exists.
"""

from typing import Optional

from ...shared import Settings, get_settings
from .models import EmbeddingModelInfo

MODEL_FILE_NAME = "model.onnx"
TOKENIZER_FILE_NAME = "tokenizer.json"
VOCAB_FILE_NAME = "vocab.txt"


def resolve_model_info(settings: Optional[Settings] = None) -> EmbeddingModelInfo:
    """
    Describe the configured model directory.

    Args:
        settings: Settings to read (defaults to the process settings)

    Returns:
        EmbeddingModelInfo with candidate file paths filled in
    """
    settings = settings or get_settings()
    base_dir = settings.model_directory

    return EmbeddingModelInfo(
        model_directory=base_dir,
        model_file_path=base_dir / MODEL_FILE_NAME,
        tokenizer_file_path=settings.tokenizer_path or base_dir / TOKENIZER_FILE_NAME,
        vocab_file_path=base_dir / VOCAB_FILE_NAME,
        embedding_dimension=settings.embedding_dimension,
        max_token_length=settings.max_token_length,
        pooling_strategy=settings.pooling_strategy,
    )
