"""Frequency-domain filters and FIR smoothing for SECAM signal processing.

Spectra are indexed like ``numpy.fft`` output and filtered against signed
bin frequencies, so a band-pass centred on a positive frequency keeps only
that side of the spectrum and yields an analytic (complex) signal. Pass
``symmetric=True`` to filter on |f| instead, as the real luma path does.

``forward_transform`` uses the synthesis kernel sign, so a forward/inverse
pair returns its input circularly time-reversed. ``reverse_samples`` undoes
that once the decoder is back in the time domain.
"""

import numpy as np
from scipy.signal import firwin
from scipy.fft import fft, ifft, fftfreq, rfft, irfft, next_fast_len

from .constants import FILTER_ORDER


def forward_transform(signal):
    """Complex spectrum of a (real or complex) signal."""
    signal = np.asarray(signal)
    return ifft(signal) * len(signal)


def inverse_transform(spectrum):
    """Complex time-domain samples of a spectrum."""
    return ifft(spectrum)


def reverse_samples(samples):
    """Circularly reverse samples about index 0: out[n] = in[-n]."""
    return np.roll(samples[::-1], 1)


def frequency_axis(n, sample_rate):
    """Signed frequency in Hz of each of ``n`` spectrum bins."""
    return fftfreq(n, d=1.0 / sample_rate)


def _bin_frequencies(spectrum, sample_rate, symmetric):
    freqs = frequency_axis(len(spectrum), sample_rate)
    return np.abs(freqs) if symmetric else freqs


def _band_response(freqs, center_hz, bandwidth_hz, resonance):
    """Butterworth-shaped magnitude response around ``center_hz``.

    Order is FILTER_ORDER * resonance. Zero bandwidth gives non-finite
    values, which callers leave for the final clamp.
    """
    order = FILTER_ORDER * resonance
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        x = (freqs - center_hz) / (bandwidth_hz / 2.0)
        return 1.0 / np.sqrt(1.0 + np.abs(x) ** (2.0 * order))


def band_pass(spectrum, sample_rate, center_hz, bandwidth_hz, resonance=1.0,
              blend=1.0, symmetric=False):
    """Keep the band ``center_hz`` +/- ``bandwidth_hz / 2``.

    Args:
        spectrum: Complex spectrum.
        sample_rate: Sample rate in Hz.
        center_hz: Band centre (signed).
        bandwidth_hz: Full width of the passband.
        resonance: Transition steepness; higher is sharper.
        blend: 1.0 returns the filtered spectrum, 0.0 the input unchanged.
        symmetric: Evaluate the response on |f| so the band is mirrored onto
            negative frequencies and a real signal stays real.

    Returns:
        Filtered spectrum (same length).
    """
    response = _band_response(_bin_frequencies(spectrum, sample_rate, symmetric),
                              center_hz, bandwidth_hz, resonance)
    return blend * (spectrum * response) + (1.0 - blend) * spectrum


def notch(spectrum, sample_rate, center_hz, bandwidth_hz, resonance=1.0,
          blend=1.0, symmetric=False):
    """Remove the band ``center_hz`` +/- ``bandwidth_hz / 2``.

    Same arguments as ``band_pass``; the response is its power complement.
    """
    passed = _band_response(_bin_frequencies(spectrum, sample_rate, symmetric),
                            center_hz, bandwidth_hz, resonance)
    with np.errstate(invalid='ignore'):
        response = np.sqrt(1.0 - passed ** 2)
    return blend * (spectrum * response) + (1.0 - blend) * spectrum


def fractional_shift(spectrum, bin_offset):
    """Shift a spectrum by ``bin_offset`` bins (may be fractional).

    Positive offsets move content toward higher bins. Implemented by
    modulating the time-domain samples, so the shift is exact and circular.
    """
    n = len(spectrum)
    ramp = np.exp(2j * np.pi * bin_offset * np.arange(n) / n)
    return fft(ifft(spectrum) * ramp)


def differentiate(spectrum, sample_rate):
    """Time derivative (per second) of the signal a spectrum represents."""
    omega = 2.0 * np.pi * frequency_axis(len(spectrum), sample_rate)
    return spectrum * (1j * omega)


def design_lowpass(cutoff_hz, sample_rate, num_taps=101):
    """Design a FIR low-pass filter.

    Args:
        cutoff_hz: Cutoff frequency in Hz.
        sample_rate: Sample rate in Hz.
        num_taps: Number of filter taps (odd for symmetric).

    Returns:
        FIR filter coefficients (1D array, float64).
    """
    nyquist = sample_rate / 2
    return firwin(num_taps, cutoff_hz / nyquist)


def apply_filter_zero_phase(coeffs, signal):
    """Apply a FIR filter with zero phase distortion using FFT.

    Uses |H(f)|^2 multiplication in frequency domain, equivalent to
    scipy.signal.filtfilt but faster for longer filters.
    """
    n = len(signal)
    fft_n = next_fast_len(n + len(coeffs) - 1)
    H = rfft(coeffs, n=fft_n)
    H2 = (H * np.conj(H)).real
    X = rfft(signal, n=fft_n)
    return irfft(X * H2, n=fft_n)[:n]


def smoothing_filter(signal, sample_rate, cutoff_hz, num_taps=101):
    """Zero-phase low-pass smoothing of a real signal.

    Returns the signal unchanged when ``cutoff_hz`` is at or above Nyquist.
    """
    if cutoff_hz >= sample_rate / 2:
        return np.asarray(signal, dtype=np.float64)
    return apply_filter_zero_phase(design_lowpass(cutoff_hz, sample_rate, num_taps),
                                   signal)
