"""Command-line front end for the SECAM composite video simulator."""

import argparse
import itertools
import multiprocessing
import os
import shutil
import subprocess
import sys

import cv2
import numpy as np
from tqdm import tqdm

from secam_simulator.colorbars import generate_colorbars
from secam_simulator.config import SECAM
from secam_simulator.constants import ALL_CHANNELS
from secam_simulator.decoder import decode_frame
from secam_simulator.encoder import encode_frame
from secam_simulator.pipeline import SignalPipeline
from secam_simulator.signal_io import (
    export_signal, import_signal, export_wav, import_wav, sample_rate_for,
)
from secam_simulator.timing import active_width_for


DEFAULT_ACTIVE_WIDTH = 720

# Two fields per frame when interlaced.
FRAME_RATE = SECAM.framerate / 2 if SECAM.interlaced else SECAM.framerate


def _fail(message):
    print(f"Error: {message}")
    sys.exit(1)


# --- Video and image files ---

class VideoSource:
    """Frames of a video file, yielded as RGB arrays."""

    def __init__(self, path):
        self.capture = cv2.VideoCapture(path)
        if not self.capture.isOpened():
            _fail(f"Cannot open video file '{path}'")

    @property
    def frame_count(self):
        return int(self.capture.get(cv2.CAP_PROP_FRAME_COUNT))

    @property
    def size(self):
        return (int(self.capture.get(cv2.CAP_PROP_FRAME_WIDTH)),
                int(self.capture.get(cv2.CAP_PROP_FRAME_HEIGHT)))

    def __iter__(self):
        while True:
            ok, frame_bgr = self.capture.read()
            if not ok:
                return
            yield cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

    def close(self):
        self.capture.release()


class FFmpegSink:
    """x264 encode fed with raw RGB over a pipe, flagged top-field-first."""

    def __init__(self, path, width, height, fps, crf=17, preset='fast'):
        cmd = [
            'ffmpeg', '-y',
            '-f', 'rawvideo', '-pix_fmt', 'rgb24',
            '-s', f'{width}x{height}', '-r', str(fps),
            '-i', 'pipe:0',
            '-vf', 'setfield=tff', '-flags', '+ilme+ildct', '-top', '1',
            '-c:v', 'libx264', '-preset', preset, '-crf', str(crf),
            '-pix_fmt', 'yuv420p',
            path,
        ]
        self.proc = subprocess.Popen(cmd, stdin=subprocess.PIPE,
                                     stdout=subprocess.DEVNULL,
                                     stderr=subprocess.DEVNULL)

    def write(self, frame_rgb):
        self.proc.stdin.write(np.ascontiguousarray(frame_rgb).tobytes())

    def close(self):
        self.proc.stdin.close()
        self.proc.wait()


class OpenCVSink:
    """mp4v writer for systems without ffmpeg. Carries no field flags."""

    def __init__(self, path, width, height, fps):
        fourcc = cv2.VideoWriter_fourcc(*'mp4v')
        self.writer = cv2.VideoWriter(path, fourcc, fps, (width, height))

    def write(self, frame_rgb):
        self.writer.write(cv2.cvtColor(frame_rgb, cv2.COLOR_RGB2BGR))

    def close(self):
        self.writer.release()


def open_sink(path, width, height, fps, crf=17, preset='fast'):
    if shutil.which('ffmpeg'):
        return FFmpegSink(path, width, height, fps, crf, preset)
    print("Warning: ffmpeg not found, output will not be flagged as interlaced")
    return OpenCVSink(path, width, height, fps)


def _has_audio(path):
    if not shutil.which('ffprobe'):
        return False
    probe = subprocess.run(
        ['ffprobe', '-v', 'error', '-select_streams', 'a',
         '-show_entries', 'stream=codec_type', '-of', 'csv=p=0', path],
        capture_output=True, text=True,
    )
    return 'audio' in probe.stdout


def copy_audio(source_path, video_path):
    """Mux the source's audio track into ``video_path`` in place, if it has one."""
    if not shutil.which('ffmpeg') or not _has_audio(source_path):
        return
    muxed = video_path + '.mux.mp4'
    result = subprocess.run(
        ['ffmpeg', '-y', '-i', video_path, '-i', source_path,
         '-map', '0:v', '-map', '1:a', '-c:v', 'copy',
         '-c:a', 'aac', '-b:a', '192k', '-shortest', muxed],
        stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
    )
    if result.returncode == 0:
        os.replace(muxed, video_path)
    elif os.path.exists(muxed):
        os.remove(muxed)


def read_image(path):
    frame_bgr = cv2.imread(path, cv2.IMREAD_COLOR)
    if frame_bgr is None:
        _fail(f"Cannot open image '{path}'")
    return cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)


def write_image(path, image_rgb):
    if not cv2.imwrite(path, cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR)):
        _fail(f"Cannot write image '{path}'")


def read_signal(path):
    """Load one frame of composite signal from .npy or .wav."""
    if path.lower().endswith('.wav'):
        signal, _ = import_wav(path)
        return signal, sample_rate_for(signal)
    return import_signal(path)


def write_signal(signal, npy_path=None, wav_path=None):
    if npy_path:
        export_signal(signal, npy_path)
        print(f"Signal: {npy_path} ({len(signal)} samples)")
    if wav_path:
        export_wav(signal, wav_path)
        print(f"WAV: {wav_path}")


# --- Frame processing ---

def fit_active_width(frame_rgb, active_width):
    """Resample a frame horizontally so each pixel becomes one active sample."""
    if frame_rgb.shape[1] == active_width:
        return frame_rgb
    return cv2.resize(frame_rgb, (active_width, frame_rgb.shape[0]),
                      interpolation=cv2.INTER_AREA)


def to_display(decoded_rgba, width, height):
    """Drop alpha and scale a decoded frame to the output size."""
    rgb = np.ascontiguousarray(decoded_rgba[:, :, :3])
    if rgb.shape[:2] != (height, width):
        rgb = cv2.resize(rgb, (width, height), interpolation=cv2.INTER_LINEAR)
    return rgb


def _frame_seed(args, frame_number):
    return None if args.seed is None else args.seed + frame_number


def effect_options(args, frame_number=0):
    """Effects dict for SignalPipeline.from_effects. Plain data, so it pickles."""
    effects = {}
    if args.ghost:
        effects['ghost'] = {'amplitude': args.ghost, 'delay_us': args.ghost_delay}
    if args.attenuation:
        effects['attenuation'] = {'strength': args.attenuation}
    if args.noise:
        effects['noise'] = {'amplitude': args.noise,
                            'rng': _frame_seed(args, frame_number)}
    return effects


def decode_options(args, frame_number=0):
    """Receiver keyword arguments for decode_frame."""
    return {
        'crosstalk': args.crosstalk,
        'resonance': args.resonance,
        'jitter': args.jitter,
        'channel_mask': args.channels,
        'rng': _frame_seed(args, frame_number),
    }


def impair(signal, effects):
    if not effects:
        return signal
    pipeline = SignalPipeline.from_effects(effects)
    print(f"  Effects: {', '.join(pipeline.names)}")
    return pipeline.process(signal)


def simulate(frame_rgb, active_width, effects, receiver):
    """One frame through encoder, channel effects and decoder. Returns RGBA."""
    signal = encode_frame(fit_active_width(frame_rgb, active_width))
    if effects:
        signal = SignalPipeline.from_effects(effects).process(signal)
    return decode_frame(signal, active_width, **receiver)


def _roundtrip_job(job):
    # Module level so multiprocessing can pickle it.
    frame_rgb, size, active_width, effects, receiver = job
    return to_display(simulate(frame_rgb, active_width, effects, receiver), *size)


def _worker_count():
    return max(1, (os.cpu_count() or 2) - 1)


def _batches(iterable, size):
    iterator = iter(iterable)
    while True:
        batch = list(itertools.islice(iterator, size))
        if not batch:
            return
        yield batch


# --- Commands ---

def cmd_encode(args):
    """Image -> one frame of composite signal."""
    frame_rgb = fit_active_width(read_image(args.input), args.active_width)
    print(f"Encoding {args.input} at {args.active_width} active samples per line...")
    write_signal(encode_frame(frame_rgb), args.output, args.wav)


def cmd_decode(args):
    """Composite signal (.npy or .wav) -> image."""
    signal, sample_rate = read_signal(args.input)
    print(f"Decoding {args.input}: {len(signal)} samples at {sample_rate / 1e6:.3f} MHz")
    signal = impair(signal, effect_options(args))

    active_width = args.active_width or active_width_for(len(signal), SECAM)
    decoded = decode_frame(signal, active_width, **decode_options(args))

    width = args.width or active_width
    height = args.height or SECAM.total_scanlines
    write_image(args.output, to_display(decoded, width, height))
    print(f"Output: {args.output} ({width}x{height})")


def cmd_image(args):
    """Image -> composite signal -> image."""
    frame_rgb = read_image(args.input)
    height, width = frame_rgb.shape[:2]
    print(f"Input: {args.input} ({width}x{height})")

    signal = encode_frame(fit_active_width(frame_rgb, args.active_width))
    write_signal(signal, args.signal, args.wav)
    signal = impair(signal, effect_options(args))
    decoded = decode_frame(signal, args.active_width, **decode_options(args))

    width = args.width or width
    height = args.height or height
    write_image(args.output, to_display(decoded, width, height))
    print(f"Output: {args.output} ({width}x{height})")


def cmd_roundtrip(args):
    """Video -> composite signal -> interlaced video, one frame per worker job."""
    source = VideoSource(args.input)
    width = args.width or source.size[0]
    height = args.height or source.size[1]
    workers = _worker_count()

    effects = effect_options(args)
    if effects:
        print(f"  Effects: {', '.join(effects)}")
    print(f"Roundtrip ({SECAM.total_scanlines}i): {args.input} -> {args.output}")
    print(f"  {width}x{height} at {FRAME_RATE:g} fps, {workers} workers")

    sink = open_sink(args.output, width, height, FRAME_RATE, args.crf, args.preset)
    jobs = ((frame, (width, height), args.active_width,
             effect_options(args, number), decode_options(args, number))
            for number, frame in enumerate(source))
    written = 0
    with multiprocessing.Pool(workers) as pool, \
            tqdm(total=source.frame_count or None, unit='frame', desc='Roundtrip') as progress:
        for batch in _batches(jobs, workers * 2):
            for frame in pool.map(_roundtrip_job, batch):
                sink.write(frame)
            written += len(batch)
            progress.update(len(batch))

    source.close()
    sink.close()
    print(f"Done: {written} frames")
    copy_audio(args.input, args.output)


def cmd_colorbars(args):
    """EBU color bars -> composite signal."""
    bars = generate_colorbars(args.active_width, SECAM.visible_scanlines)
    print(f"Encoding EBU color bars ({args.active_width}x{SECAM.visible_scanlines})...")
    write_signal(encode_frame(bars), args.output, args.wav)
    if args.save_png:
        write_image(args.save_png, bars)
        print(f"Pattern: {args.save_png}")


# --- Argument parsing ---

def _width_options(default=DEFAULT_ACTIVE_WIDTH):
    parent = argparse.ArgumentParser(add_help=False)
    hint = 'inferred from signal length' if default is None else default
    parent.add_argument('--active-width', type=int, default=default,
                        help=f'Active samples per line (default: {hint})')
    return parent


def _output_size_options(hint):
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument('--width', type=int, default=None, help=f'Output width (default: {hint})')
    parent.add_argument('--height', type=int, default=None, help=f'Output height (default: {hint})')
    return parent


def _receiver_options():
    parent = argparse.ArgumentParser(add_help=False)
    group = parent.add_argument_group('receiver')
    group.add_argument('--crosstalk', type=float, default=0.0,
                       help='Luma/chroma band leakage 0-1 (default: 0)')
    group.add_argument('--resonance', type=float, default=1.0,
                       help='Filter steepness, higher is sharper (default: 1)')
    group.add_argument('--jitter', type=float, default=0.0,
                       help='Horizontal sync jitter as a fraction of line width')
    group.add_argument('--channels', type=int, default=ALL_CHANNELS,
                       choices=range(ALL_CHANNELS + 1), metavar='MASK',
                       help='Channel mask 0-7: 1=Y, 2=Db, 4=Dr (default: 7)')
    group.add_argument('--seed', type=int, default=None,
                       help='Random seed for jitter and noise (offset per frame)')
    return parent


def _effect_options():
    parent = argparse.ArgumentParser(add_help=False)
    group = parent.add_argument_group('channel effects')
    group.add_argument('--noise', type=float, default=None,
                       help='Snow amplitude (e.g. 0.02=faint, 0.2=heavy)')
    group.add_argument('--ghost', type=float, default=None,
                       help='Multipath echo amplitude 0-1')
    group.add_argument('--ghost-delay', type=float, default=2.0,
                       help='Echo delay in microseconds (default: 2.0)')
    group.add_argument('--attenuation', type=float, default=None,
                       help='Signal fade 0-1 (darker, weaker chroma)')
    return parent


def build_parser():
    parser = argparse.ArgumentParser(
        description="SECAM Composite Video Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  python main.py encode photo.png -o signal.npy
  python main.py decode signal.npy -o decoded.png --crosstalk 0.1
  python main.py image photo.png -o secam_photo.png --jitter 0.005 --seed 1
  python main.py roundtrip input.mp4 -o output.mp4 --noise 0.03
  python main.py colorbars -o colorbars.npy
        """)
    sub = parser.add_subparsers(dest='command', help='Command to run')
    receiver, effects = _receiver_options(), _effect_options()
    wav_help = 'Also export as 32-bit float WAV (48 kHz header)'

    p = sub.add_parser('encode', parents=[_width_options()],
                       help='Encode an image to composite signal')
    p.add_argument('input', help='Input image file')
    p.add_argument('-o', '--output', default='signal.npy', help='Output signal file (.npy)')
    p.add_argument('--wav', default=None, help=wav_help)
    p.set_defaults(func=cmd_encode)

    p = sub.add_parser('decode', help='Decode composite signal to an image',
                       parents=[_width_options(None), _output_size_options('signal geometry'),
                                receiver, effects])
    p.add_argument('input', help='Input signal file (.npy or .wav)')
    p.add_argument('-o', '--output', default='output.png', help='Output image file')
    p.set_defaults(func=cmd_decode)

    p = sub.add_parser('image', help='Roundtrip a single image through SECAM',
                       parents=[_width_options(), _output_size_options('input size'),
                                receiver, effects])
    p.add_argument('input', help='Input image file (PNG, JPG, etc.)')
    p.add_argument('-o', '--output', default='output.png', help='Output image file')
    p.add_argument('--signal', default=None, help='Also export composite signal (.npy)')
    p.add_argument('--wav', default=None, help=wav_help)
    p.set_defaults(func=cmd_image)

    p = sub.add_parser('roundtrip', help='Video -> composite -> interlaced video',
                       parents=[_width_options(), _output_size_options('input size'),
                                receiver, effects])
    p.add_argument('input', help='Input video file')
    p.add_argument('-o', '--output', default='output.mp4', help='Output video file')
    p.add_argument('--crf', type=int, default=17,
                   help='x264 CRF quality (0=lossless, 51=worst, default: 17)')
    p.add_argument('--preset', default='fast', help='x264 preset (default: fast)')
    p.set_defaults(func=cmd_roundtrip)

    p = sub.add_parser('colorbars', parents=[_width_options()],
                       help='Generate an EBU color bar test signal')
    p.add_argument('-o', '--output', default='colorbars.npy', help='Output signal file (.npy)')
    p.add_argument('--wav', default=None, help=wav_help)
    p.add_argument('--save-png', default=None, help='Also save the source pattern as PNG')
    p.set_defaults(func=cmd_colorbars)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == '__main__':
    main()
