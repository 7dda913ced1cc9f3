"""
Numeric limits and tolerances used across pydfc.
"""

import math
import sys

# Filter order
DEGREE_MIN = 1
DEGREE_MAX = 1024

# Sample frequency in Hz
SAMPLE_FREQ_MIN = 1e-6
SAMPLE_FREQ_MAX = 4.0 / sys.float_info.epsilon

# Lowest frequency (Hz) accepted after pre-warping
FREQ_MIN = SAMPLE_FREQ_MIN / 2.0

# Coefficients with a magnitude below this are treated as zero
APPROX_ZERO = sys.float_info.epsilon / 32.0

# Maximum number of samples simulated by a time response scan
TIME_SAMPLES_LIMIT = 2048

# Attenuation limits in dB (single precision decade range)
ATTENUATION_MAX = 20.0 * 38
RIPPLE_MIN = 1.0 / ATTENUATION_MAX
RIPPLE_MAX = 10.0 * math.log10(2.0)
STOPBAND_MIN = 10.0 * math.log10(2.0)
STOPBAND_MAX = ATTENUATION_MAX

# Elliptic module angle in degrees
ANGLE_MIN = 0.001
ANGLE_MAX = 89.999

# Kaiser window parameter
KAISER_ALPHA_MIN = 2.0
KAISER_ALPHA_MAX = 10.0

# Bessel cutoff search
BESSEL_MAXITER = 10000
BESSEL_RTOL = 1e-6

# Magnitude at the 3 dB cutoff frequency
CUTOFF_3DB = 1.0 / math.sqrt(2.0)
