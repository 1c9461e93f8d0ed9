"""Named flag sets for training and prediction.

The model library takes a single integer bit-mask. Callers work with the
named booleans below; the mask is built only in :meth:`to_bits` right before
the library call.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

RAW_OUTPUT = 1
COMPRESSED_INPUT = 2
PREPROCESSED_INPUT = 4
PREDICT_SUM = 1 << 8
PREDICT_MAX_VOTE = 2 << 8


class TrainFlags(BaseModel):
    """Flags accepted by ``train``."""

    model_config = ConfigDict(frozen=True)

    raw_output: bool = False
    compressed_input: bool = False
    predict_sum: bool = False
    predict_max_vote: bool = False

    @classmethod
    def from_bits(cls, bits: int) -> TrainFlags:
        """Decode a raw bit-mask."""
        return cls(
            raw_output=bool(bits & RAW_OUTPUT),
            compressed_input=bool(bits & COMPRESSED_INPUT),
            predict_sum=bool(bits & PREDICT_SUM),
            predict_max_vote=bool(bits & PREDICT_MAX_VOTE),
        )

    def to_bits(self) -> int:
        """Encode as the library bit-mask."""
        bits = 0
        if self.raw_output:
            bits |= RAW_OUTPUT
        if self.compressed_input:
            bits |= COMPRESSED_INPUT
        if self.predict_sum:
            bits |= PREDICT_SUM
        if self.predict_max_vote:
            bits |= PREDICT_MAX_VOTE
        return bits


class PredictFlags(TrainFlags):
    """Flags accepted by ``predict``."""

    preprocessed_input: bool = False

    @classmethod
    def from_bits(cls, bits: int) -> PredictFlags:
        """Decode a raw bit-mask."""
        base = TrainFlags.from_bits(bits)
        return cls(**base.model_dump(), preprocessed_input=bool(bits & PREPROCESSED_INPUT))

    def to_bits(self) -> int:
        """Encode as the library bit-mask."""
        bits = super().to_bits()
        if self.preprocessed_input:
            bits |= PREPROCESSED_INPUT
        return bits

    def with_predict_auto(self, auto: bool) -> PredictFlags:
        """Apply the ``PredictAuto`` option.

        Automatic vote aggregation is expressed by clearing both explicit
        aggregation modes; ``PredictAuto=False`` sets both.
        """
        return self.model_copy(update={"predict_sum": not auto, "predict_max_vote": not auto})


__all__ = [
    "COMPRESSED_INPUT",
    "PREDICT_MAX_VOTE",
    "PREDICT_SUM",
    "PREPROCESSED_INPUT",
    "RAW_OUTPUT",
    "PredictFlags",
    "TrainFlags",
]
