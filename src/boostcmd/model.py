"""Boosted decision-tree model held by a registry handle.

:class:`BoostModel` owns one ``cv2.ml.Boost`` instance. Training, prediction
and error computation are delegated to it; this class converts arguments,
translates flags and maps library failures onto the dispatcher's errors.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import cv2
import numpy as np
from numpy.typing import NDArray

from boostcmd.config import MemoryFormat
from boostcmd.errors import LibraryError
from boostcmd.flags import PredictFlags, TrainFlags
from boostcmd.logs import get_logger
from boostcmd.marshal import to_mat
from boostcmd.types import Property
from boostcmd.persist import (
    Forest,
    link_forest,
    read_document,
    read_model,
    write_model_file,
    write_model_string,
)

logger = get_logger(__name__)


class BoostModel:
    """A trainable boosted-tree ensemble.

    Args:
        boost: Existing library model to wrap. A default one is created when None.

    Example:
        >>> import numpy as np
        >>> model = BoostModel()
        >>> x = np.random.rand(40, 3).astype(np.float32)
        >>> y = (x[:, 0] > 0.5).astype(np.int32)
        >>> from boostcmd.data import create_train_data
        >>> model.train(create_train_data(x, y))
        True
    """

    def __init__(self, boost: cv2.ml.Boost | None = None) -> None:
        self._boost = boost if boost is not None else cv2.ml.Boost_create()

    @property
    def boost(self) -> cv2.ml.Boost:
        """The wrapped library model."""
        return self._boost

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def clear(self) -> None:
        """Drop trained state, keeping hyperparameters.

        The library model cannot forget its trees, so it is replaced by a
        fresh one carrying the same hyperparameters.
        """
        fresh = cv2.ml.Boost_create()
        for prop in Property:
            value = getattr(self._boost, f"get{prop.value}")()
            if prop is Property.PRIORS and (value is None or np.size(value) == 0):
                continue
            getattr(fresh, f"set{prop.value}")(value)
        self._boost = fresh

    @classmethod
    def load(cls, source: str, *, obj_name: str = "", from_string: bool = False) -> BoostModel:
        """Create a model from a file or from serialized text."""
        return cls(read_model(source, obj_name=obj_name, from_string=from_string))

    def save(self, path: str | Path) -> None:
        """Write the model to a file."""
        write_model_file(self._boost, path)

    def dumps(self, name: str = ".yml", default: MemoryFormat = ".yml") -> str:
        """Serialize the model to text; the extension of ``name`` selects the format."""
        return write_model_string(self._boost, name, default)

    # =========================================================================
    # Introspection
    # =========================================================================

    def empty(self) -> bool:
        return bool(self._boost.empty())

    def is_trained(self) -> bool:
        return bool(self._boost.isTrained())

    def is_classifier(self) -> bool:
        return bool(self._boost.isClassifier())

    def get_var_count(self) -> int:
        return int(self._boost.getVarCount())

    def get_default_name(self) -> str:
        return str(self._boost.getDefaultName())

    def forest(self) -> Forest:
        """Node, split, subset and root tables of the trained ensemble.

        Empty tables when the model is untrained.
        """
        envelope = read_document(self._boost)
        if envelope is None:
            return Forest()
        return link_forest(envelope.model)

    def get_nodes(self) -> NDArray[np.void]:
        return self.forest().node_array()

    def get_roots(self) -> NDArray[np.int32]:
        return self.forest().root_array()

    def get_splits(self) -> NDArray[np.void]:
        return self.forest().split_array()

    def get_subsets(self) -> NDArray[np.int32]:
        return self.forest().subset_array()

    # =========================================================================
    # Training and inference
    # =========================================================================

    def train(self, data: cv2.ml.TrainData, flags: TrainFlags | None = None) -> bool:
        """Fit the ensemble, replacing any previous trees.

        Raises:
            LibraryError: If the library rejects the data (e.g. more than two classes).
        """
        bits = (flags or TrainFlags()).to_bits()
        try:
            ok = bool(self._boost.train(data, bits))
        except cv2.error as e:
            raise LibraryError(f"Training failed: {e}") from e
        logger.debug("model_trained", ok=ok, flags=bits, n_samples=data.getNSamples())
        return ok

    def calc_error(self, data: cv2.ml.TrainData, test: bool = False) -> tuple[float, NDArray[np.float32]]:
        """Error on the train or test subset of ``data``.

        Returns:
            Tuple of (error, responses). Classification error is a percentage;
            regression error is the mean squared error.
        """
        try:
            err, resp = self._boost.calcError(data, test)
        except cv2.error as e:
            raise LibraryError(f"Error computation failed: {e}") from e
        resp = np.empty((0, 1), dtype=np.float32) if resp is None else np.asarray(resp)
        return float(err), resp

    def predict(self, samples: Any, flags: PredictFlags | None = None) -> tuple[NDArray[np.float32], float]:
        """Predict one response per sample row.

        Returns:
            Tuple of (results, first-sample score).
        """
        x = to_mat(samples, np.float32, what="samples")
        bits = (flags or PredictFlags()).to_bits()
        try:
            value, results = self._boost.predict(x, flags=bits)
        except cv2.error as e:
            raise LibraryError(f"Prediction failed: {e}") from e
        return np.asarray(results), float(value)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"BoostModel(trained={self.is_trained()}, var_count={self.get_var_count()})"


__all__ = ["BoostModel"]
