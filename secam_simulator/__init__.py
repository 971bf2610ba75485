"""SECAM Composite Video Simulator."""

from .config import FormatConfig, SubcarrierChannel, SECAM, get_format
from .constants import ALL_CHANNELS, LUMA_CHANNEL, DB_CHANNEL, DR_CHANNEL
from .encoder import encode_frame
from .decoder import decode_frame
from .pipeline import SignalPipeline
from .signal_io import export_signal, import_signal, export_wav, import_wav
from .colorbars import generate_colorbars
from .effects import add_noise, add_ghosting, add_attenuation
