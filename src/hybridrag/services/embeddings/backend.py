"""
Inference backends for the embedding provider.

A backend is an opaque "named tensors in, named tensors out" callable. The
provider only relies on :attr:`InferenceBackend.input_names` and on the
first output returned by :meth:`InferenceBackend.run`.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np

from ...shared import get_logger
from ...shared.exceptions import ConfigurationError, InferenceError

logger = get_logger(__name__)


class InferenceBackend(ABC):
    """Abstract base class for model runtimes."""

    @property
    @abstractmethod
    def input_names(self) -> List[str]:
        """Names of the tensors the model expects."""
        pass

    @abstractmethod
    def run(self, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        """
        Run the model.

        Args:
            inputs: Tensors keyed by input name

        Returns:
            Output tensors keyed by output name, in model output order
        """
        pass


class OnnxInferenceBackend(InferenceBackend):
    """
    ONNX Runtime session wrapper.

    ``onnxruntime`` is imported on construction so the package imports
    cleanly without the ``onnx`` extra installed.
    """

    def __init__(self,
                 model_path: Union[str, Path],
                 providers: Optional[List[str]] = None):
        try:
            import onnxruntime as ort  # type: ignore
        except ImportError as e:
            logger.error("onnxruntime is required but missing: %s", e)
            raise ConfigurationError(
                "onnxruntime is required for model inference. "
                "Install it with 'pip install hybridrag[onnx]'."
            ) from e

        self.model_path = Path(model_path)
        if not self.model_path.is_file():
            raise ConfigurationError(f"Model file not found: {self.model_path}")

        providers = providers or ["CPUExecutionProvider"]
        try:
            self._session = ort.InferenceSession(str(self.model_path), providers=providers)
        except Exception as e:
            raise InferenceError(f"Failed to load ONNX model {self.model_path}: {e}") from e

        self._input_names = [node.name for node in self._session.get_inputs()]
        self._output_names = [node.name for node in self._session.get_outputs()]
        logger.info(f"Loaded ONNX model {self.model_path.name} (inputs: {', '.join(self._input_names)})")

    @property
    def input_names(self) -> List[str]:
        return list(self._input_names)

    def run(self, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        feeds = {name: inputs[name] for name in self._input_names if name in inputs}
        outputs = self._session.run(None, feeds)
        return dict(zip(self._output_names, outputs))
