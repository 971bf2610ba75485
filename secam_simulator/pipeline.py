"""Ordered chain of channel impairments between encode and decode."""

from .config import SECAM
from .effects import add_noise, add_ghosting, add_attenuation
from .signal_io import sample_rate_for


# Factories by effects-dict key, in the order a transmission meets them:
# multipath on the way, fading at the antenna, then receiver noise.
EFFECT_FACTORIES = {
    'ghost': add_ghosting,
    'attenuation': add_attenuation,
    'noise': add_noise,
}


class SignalPipeline:
    """Named signal transforms applied in insertion order.

    Each transform is ``fn(signal, sample_rate) -> signal``. When ``process``
    is not given a sample rate it derives one from the frame length and the
    pipeline's format.
    """

    def __init__(self, config=SECAM):
        self.config = config
        self.stages = []

    @classmethod
    def from_effects(cls, effects, config=SECAM):
        """Build a pipeline from a plain ``{name: kwargs}`` effects dict.

        Stages are ordered by EFFECT_FACTORIES regardless of dict order.
        Unknown names raise ValueError.
        """
        unknown = set(effects) - set(EFFECT_FACTORIES)
        if unknown:
            raise ValueError(f"Unknown effect(s): {', '.join(sorted(unknown))}")
        pipeline = cls(config)
        for name, factory in EFFECT_FACTORIES.items():
            if name in effects:
                pipeline.add(factory(**effects[name]), name)
        return pipeline

    def add(self, transform_fn, name=None):
        """Append a transform; returns self for chaining."""
        if name is None:
            name = getattr(transform_fn, '__name__', 'transform')
        self.stages.append((name, transform_fn))
        return self

    @property
    def names(self):
        return [name for name, _ in self.stages]

    def process(self, signal, sample_rate=None):
        """Run every stage over one composite frame.

        Args:
            signal: 1D composite signal.
            sample_rate: Sample rate in Hz; derived from ``config`` if omitted.

        Returns:
            Transformed signal array.
        """
        if sample_rate is None:
            sample_rate = sample_rate_for(signal, self.config)
        for _, fn in self.stages:
            signal = fn(signal, sample_rate)
        return signal

    def clear(self):
        self.stages.clear()

    def __len__(self):
        return len(self.stages)
