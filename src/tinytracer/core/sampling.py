"""Explicit random streams for Monte Carlo sampling.

Every sampling function takes a 32-bit stream state and returns the advanced
state together with the sampled value, so callers thread the state through
their own code instead of relying on a process-wide generator. A stream is
created with seed_stream(seed, stream_id); the renderer gives every pixel its
own stream, which keeps results independent of how Taichi schedules the
outer pixel loop.

The generator is a 32-bit LCG with a PCG-style output permutation (RXS-M-XS).
Only 24 bits are used when producing floats so that the result is an exact
float32 value in [0, 1).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.core.sampling import seed_stream, uniform_float
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     state = seed_stream(7, 0)
    ...     state, value = uniform_float(state)
    ...     return value
"""

import numpy as np
import taichi as ti
import taichi.math as tm

vec2 = tm.vec2
vec3 = tm.vec3

# LCG step; multiplier is 1 mod 4 and the increment is odd, giving period 2^32
LCG_MULTIPLIER = 747796405
LCG_INCREMENT = 1013904223

# PCG RXS-M-XS output permutation
PERMUTE_MULTIPLIER = 277803737

# 2^-24
FLOAT_SCALE = 1.0 / 16777216.0

# Squared-length guard for rejection sampling (avoids normalizing ~zero vectors)
UNIT_SPHERE_EPSILON = 1e-12

# Cap on rejection sampling draws; acceptance is ~52% per draw
MAX_REJECTION_ATTEMPTS = 100


@ti.func
def _permute(state: ti.u32) -> ti.u32:
    """Scramble an LCG state into a well-distributed output word."""
    shift = (state >> ti.u32(28)) + ti.u32(4)
    word = ((state >> shift) ^ state) * ti.u32(PERMUTE_MULTIPLIER)
    return (word >> ti.u32(22)) ^ word


@ti.func
def next_u32(state: ti.u32):
    """Advance a stream by one step.

    Args:
        state: The current stream state.

    Returns:
        A tuple (new_state, bits) where bits is a uniformly distributed u32.
    """
    new_state = state * ti.u32(LCG_MULTIPLIER) + ti.u32(LCG_INCREMENT)
    return new_state, _permute(new_state)


@ti.func
def seed_stream(seed: ti.i32, stream_id: ti.i32) -> ti.u32:
    """Create the initial state of an independent stream.

    Two hashing rounds decorrelate neighbouring stream ids (adjacent pixels)
    and neighbouring seeds.

    Args:
        seed: The global seed shared by all streams of a render.
        stream_id: Identifier of the stream (e.g. a flat pixel index).

    Returns:
        The initial state for the stream.
    """
    state = _permute(ti.cast(seed, ti.u32) * ti.u32(LCG_MULTIPLIER) + ti.u32(LCG_INCREMENT))
    return _permute(state + ti.cast(stream_id, ti.u32))


@ti.func
def uniform_float(state: ti.u32):
    """Draw a float uniformly distributed in [0, 1).

    Returns:
        A tuple (new_state, value).
    """
    new_state, bits = next_u32(state)
    value = ti.cast(bits >> ti.u32(8), ti.f32) * FLOAT_SCALE
    return new_state, value


@ti.func
def uniform_float_range(state: ti.u32, min_value: ti.f32, max_value: ti.f32):
    """Draw a float uniformly distributed in [min_value, max_value).

    Returns:
        A tuple (new_state, value).
    """
    new_state, u = uniform_float(state)
    return new_state, min_value + (max_value - min_value) * u


@ti.func
def uniform_vec2(state: ti.u32):
    """Draw a vec2 with components uniform in [0, 1), x first."""
    s, x = uniform_float(state)
    s, y = uniform_float(s)
    return s, vec2(x, y)


@ti.func
def uniform_vec2_range(state: ti.u32, min_value: ti.f32, max_value: ti.f32):
    """Draw a vec2 with components uniform in [min_value, max_value)."""
    s, x = uniform_float_range(state, min_value, max_value)
    s, y = uniform_float_range(s, min_value, max_value)
    return s, vec2(x, y)


@ti.func
def uniform_vec3(state: ti.u32):
    """Draw a vec3 with components uniform in [0, 1), x first."""
    s, x = uniform_float(state)
    s, y = uniform_float(s)
    s, z = uniform_float(s)
    return s, vec3(x, y, z)


@ti.func
def uniform_vec3_range(state: ti.u32, min_value: ti.f32, max_value: ti.f32):
    """Draw a vec3 with components uniform in [min_value, max_value)."""
    s, x = uniform_float_range(state, min_value, max_value)
    s, y = uniform_float_range(s, min_value, max_value)
    s, z = uniform_float_range(s, min_value, max_value)
    return s, vec3(x, y, z)


@ti.func
def random_unit_vector_with_attempts(state: ti.u32):
    """Rejection-sample a direction uniformly distributed on the unit sphere.

    Points are drawn from the cube [-1, 1]^3 until one falls inside the unit
    ball (squared length in (UNIT_SPHERE_EPSILON, 1]), then normalized. The
    expected acceptance rate is (4/3 * pi) / 8, about 52%.

    If MAX_REJECTION_ATTEMPTS draws are all rejected the canonical direction
    +Y is returned.

    Args:
        state: The current stream state.

    Returns:
        A tuple (new_state, direction, attempts) where attempts is the number
        of cube samples that were drawn.
    """
    s = state
    result = vec3(0.0, 1.0, 0.0)
    attempts = 0
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            p = vec3(0.0, 0.0, 0.0)
            s, p = uniform_vec3_range(s, -1.0, 1.0)
            attempts += 1
            len_sq = tm.dot(p, p)
            if len_sq > UNIT_SPHERE_EPSILON and len_sq <= 1.0:
                result = p / ti.sqrt(len_sq)
                found = True
    return s, result, attempts


@ti.func
def random_unit_vector(state: ti.u32):
    """Draw a direction uniformly distributed on the unit sphere.

    Returns:
        A tuple (new_state, direction).
    """
    s, direction, _ = random_unit_vector_with_attempts(state)
    return s, direction


# =============================================================================
# Python-side access
# =============================================================================


@ti.kernel
def _sample_unit_vectors_kernel(
    seed: ti.i32,
    count: ti.i32,
    out: ti.types.ndarray(),
    attempts: ti.types.ndarray(),
):
    for i in range(count):
        state = seed_stream(seed, i)
        state, direction, n = random_unit_vector_with_attempts(state)
        out[i, 0] = direction.x
        out[i, 1] = direction.y
        out[i, 2] = direction.z
        attempts[i] = n


def sample_unit_vectors(seed: int, count: int) -> tuple[np.ndarray, float]:
    """Draw unit vectors from `count` independent streams.

    Stream i is seeded with (seed, i) and contributes one direction.

    Args:
        seed: Global seed.
        count: Number of directions to draw (must be positive).

    Returns:
        A tuple (directions, mean_attempts) where directions has shape
        (count, 3) and mean_attempts is the average number of cube samples
        drawn per accepted direction.

    Raises:
        ValueError: If count is not positive.
    """
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")

    out = np.zeros((count, 3), dtype=np.float32)
    attempts = np.zeros(count, dtype=np.int32)
    _sample_unit_vectors_kernel(seed, count, out, attempts)
    return out, float(attempts.mean())
