"""SECAM composite video constants."""

# --- Colorimetry ---
LUMA_WEIGHTS = (0.299, 0.587, 0.114)   # R, G, B -> Y
DB_MAX = 1.333                          # Db at full-scale blue difference
DR_MAX = -1.333                         # Dr at full-scale red difference (inverted)
CHROMA_PHASE = 0.0                      # YDbDr is YUV rescaled, no rotation

# --- Bandwidth (Hz) ---
MAIN_BANDWIDTH = 5.0e6                  # Main sideband
SIDE_BANDWIDTH = 0.75e6                 # Vestigial sideband
CHROMA_BW_LOW = 2.0 * 428_125           # Chroma band extent below the carrier
CHROMA_BW_HIGH = 2.0 * 428_125          # Chroma band extent above the carrier
CHROMA_CARRIER = 4_328_125.0            # Nominal centre of the chroma band

# --- Line Structure ---
TOTAL_LINES = 625
VISIBLE_LINES = 576
FIELD_RATE = 50.0                       # Fields per second (25 interlaced frames)
ACTIVE_TIME = 5.195e-5                  # Active video per line (s)
INTERLACED = True

# --- FM Subcarriers ---
# Db is sent on even lines, Dr on odd lines, each at its own rest frequency.
DB_REST_FREQ = 4_250_000.0
DR_REST_FREQ = 4_406_250.0
DB_DEVIATION = 230_000.0                # Hz per unit of Db
DR_DEVIATION = 280_000.0                # Hz per unit of Dr
DB_BW_LOW = 2.0 * 506_000
DB_BW_HIGH = 2.0 * 350_000
DR_BW_LOW = 2.0 * 350_000
DR_BW_HIGH = 2.0 * 506_000

# Demodulator recentering offsets. Tuned so each channel's rest frequency
# lands on DC; recalibrate alongside the rest frequencies.
DB_RECENTER_FREQ = 4_250_000.0
DR_RECENTER_FREQ = 4_406_250.0

# --- Signal Levels ---
CHROMA_AMPLITUDE = 0.115                # Peak subcarrier amplitude on top of luma

# --- Gamma ---
ENCODE_GAMMA = 2.8                      # Normalised RGB is raised to this power
# Display gamma applied after decoding. Tuned by eye against ENCODE_GAMMA;
# recalibrate if the display assumption changes.
DISPLAY_GAMMA = 0.357

# --- Decoder Tunables ---
FILTER_ORDER = 8                        # Butterworth order at resonance 1.0
CHROMA_SMOOTHING_TIME = 5.0e-7          # Post-demodulation smoothing window (s)
# FM limiter: the discriminator output is divided by the smoothed subcarrier
# power, floored at this fraction of the nominal analytic amplitude A/2.
CHROMA_LIMITER_THRESHOLD = 0.05
CHROMA_LIMITER_POWER = (CHROMA_LIMITER_THRESHOLD * CHROMA_AMPLITUDE / 2.0) ** 2
NEUTRAL_LUMA = 0.5                      # Luma held here when the channel is masked

# --- Channel Mask Bits ---
LUMA_CHANNEL = 0x1
DB_CHANNEL = 0x2
DR_CHANNEL = 0x4
ALL_CHANNELS = LUMA_CHANNEL | DB_CHANNEL | DR_CHANNEL
