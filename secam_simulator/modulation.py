"""Per-sample FM chroma modulation and demodulation.

``modulate`` and ``demodulate`` are exact counterparts: a line modulated with
deviation D recovers D from the analytic subcarrier and its time derivative.
"""

import numpy as np


_TWO_PI = 2.0 * np.pi


def modulate(luma, chroma, carrier_hz, deviation_hz, sample_time, amplitude):
    """Continuous-phase FM of chroma onto a subcarrier, added to luma.

    Args:
        luma: Luma samples, shape (lines, width).
        chroma: Chroma value carried by each sample, shape (lines, width).
        carrier_hz: Rest frequency per line, shape (lines,).
        deviation_hz: Frequency deviation per unit of chroma, shape (lines,).
        sample_time: Seconds per active sample.
        amplitude: Peak subcarrier amplitude.

    Returns:
        Composite active samples, shape (lines, width). The phase
        accumulator restarts at zero on every line.
    """
    carrier = np.asarray(carrier_hz, dtype=np.float64).reshape(-1, 1)
    deviation = np.asarray(deviation_hz, dtype=np.float64).reshape(-1, 1)
    omega = _TWO_PI * (carrier + deviation * chroma)
    phase = np.cumsum(omega * sample_time, axis=-1)
    return luma + amplitude * np.cos(phase)


def demodulate(analytic, derivative, deviation_hz):
    """Instantaneous frequency deviation of an analytic baseband signal.

    Computes Im(s' * conj(s)) / (2 pi deviation), which for s = a*exp(i*phi)
    equals |a|^2 * phi' / (2 pi deviation) without unwrapping phi.
    """
    return (derivative * np.conj(analytic)).imag / (_TWO_PI * deviation_hz)
