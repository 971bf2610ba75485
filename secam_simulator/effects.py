"""Channel impairments applied to a composite frame before decoding.

Each factory validates its parameters up front and returns a transform
``fn(signal, sample_rate) -> signal`` that never modifies its input.
"""

import numpy as np


def add_noise(amplitude, rng=None):
    """Additive white Gaussian noise (snow).

    Args:
        amplitude: Standard deviation in signal units. Luma spans 0-1, so
            0.02 is faint grain and 0.2 heavy snow.
        rng: Seed or numpy Generator for reproducible noise.
    """
    if amplitude < 0:
        raise ValueError(f"Noise amplitude must be non-negative, got {amplitude}")
    generator = np.random.default_rng(rng)

    def noise(signal, sample_rate):
        if amplitude == 0:
            return signal.copy()
        return signal + generator.normal(0.0, amplitude, signal.shape)

    return noise


def add_ghosting(amplitude, delay_us=2.0):
    """Multipath echo: a delayed copy of the frame scaled by ``amplitude``.

    The delay is converted to samples at the signal's own rate, so the
    ghost lands the same distance to the right at any active width.
    """
    if delay_us < 0:
        raise ValueError(f"Ghost delay must be non-negative, got {delay_us}")

    def ghosting(signal, sample_rate):
        delay = int(round(delay_us * 1e-6 * sample_rate))
        echoed = signal.copy()
        if 0 < delay < len(signal):
            echoed[delay:] += amplitude * signal[:-delay]
        return echoed

    return ghosting


def add_attenuation(strength):
    """Weak reception: scale the whole frame toward the zero porch level.

    Luma and the chroma subcarrier shrink together, so the picture darkens.
    The FM chroma keeps its frequency and the decoder's limiter normalises
    amplitude, so Db and Dr decode unchanged until the subcarrier falls
    below the limiter threshold.

    Args:
        strength: 0 leaves the signal alone, 1 flattens it to zero.
    """
    if not 0 <= strength <= 1:
        raise ValueError(f"Attenuation strength must be in [0, 1], got {strength}")
    gain = 1.0 - strength

    def attenuation(signal, sample_rate):
        return signal * gain

    return attenuation
