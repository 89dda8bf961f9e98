"""Beam, instrument, earth and ship coordinate transforms.

All functions are vectorized over rows: beam input is ``(n, 4)`` (or a
single ``(4,)`` sample) and transformed output is ``(n, 4)`` with the
error/Q velocity in the last column. Any row that cannot be solved is
returned as ``BAD_VELOCITY`` in every column.
"""

from enum import Enum

import numpy as np

from adcpscreen.ensemble.ensemble import (
    BAD_VELOCITY,
    DEFAULT_BEAM_ANGLE,
    Encoding,
    bad_velocity_mask,
)

__all__ = [
    'HeadingSource',
    'beam_coefficients',
    'beam_to_instrument',
    'earth_rotation_matrix',
    'instrument_to_earth',
    'instrument_to_ship',
    'velocity_vectors',
]


class HeadingSource(str, Enum):
    """Heading used when rotating into the earth frame."""
    ADCP = "adcp"
    GPS = "gps"


def beam_coefficients(beam_angle: float = DEFAULT_BEAM_ANGLE):
    """Janus beam-to-instrument coefficients ``(a, b, d)``.

    ``a`` scales the horizontal differences, ``b`` the vertical sum and
    ``d`` the error velocity.
    """
    theta = np.deg2rad(beam_angle)
    a = 1.0 / (2.0 * np.sin(theta))
    b = 1.0 / (4.0 * np.cos(theta))
    d = a / np.sqrt(2.0)
    return a, b, d


def _beam_layout(encoding: Encoding):
    """Beam indices for (+X, -X, +Y, -Y)."""
    if Encoding(encoding) == Encoding.PD0:
        return 1, 0, 2, 3
    return 0, 1, 2, 3


def beam_to_instrument(beams, encoding=Encoding.NATIVE, beam_angle=DEFAULT_BEAM_ANGLE):
    """Solve instrument velocity (X, Y, Z, error) from radial beam velocities.

    Rows with four good beams use the 4-beam solution. Rows with exactly one
    bad beam are solved as a 3-beam solution: the bad beam is reconstructed
    so the error velocity is zero, and the error velocity is reported as 0.
    Rows with two or more bad beams are BAD.

    Parameters
    ----------
    beams : array-like
        ``(n, 4)`` or ``(4,)`` beam velocities.
    encoding : Encoding
        Selects the beam layout.
    beam_angle : float
        Beam angle from vertical in degrees.

    Returns
    -------
    np.ndarray
        ``(n, 4)``, or ``(4,)`` for a single sample.
    """
    single = np.ndim(beams) == 1
    beams = np.atleast_2d(np.array(beams, dtype=float))
    result = np.full((beams.shape[0], 4), BAD_VELOCITY)
    if beams.shape[0] == 0 or beams.shape[1] != 4:
        return result[0] if single else result

    a, b, d = beam_coefficients(beam_angle)
    px, mx, py, my = _beam_layout(encoding)

    bad = bad_velocity_mask(beams)
    n_bad = bad.sum(axis=1)
    three = n_bad == 1
    filled = np.where(bad, 0.0, beams)

    # error == 0  <=>  b(+x) + b(-x) == b(+y) + b(-y)
    pairs = {
        px: (mx, py, my),
        mx: (px, py, my),
        py: (my, px, mx),
        my: (py, px, mx),
    }
    for beam, (partner, other1, other2) in pairs.items():
        rows = three & bad[:, beam]
        beams[rows, beam] = filled[rows, other1] + filled[rows, other2] - filled[rows, partner]

    usable = n_bad <= 1
    u = beams[usable]
    result[usable, 0] = a * (u[:, px] - u[:, mx])
    result[usable, 1] = a * (u[:, py] - u[:, my])
    result[usable, 2] = -b * u.sum(axis=1)
    result[usable, 3] = d * (u[:, px] + u[:, mx] - u[:, py] - u[:, my])
    result[three, 3] = 0.0

    return result[0] if single else result


def earth_rotation_matrix(heading: float, pitch: float, roll: float) -> np.ndarray:
    """Rotation from instrument (x, y, z) to earth (east, north, up)."""
    h, p, r = np.deg2rad([heading, pitch, roll])
    ch, sh = np.cos(h), np.sin(h)
    cp, sp = np.cos(p), np.sin(p)
    cr, sr = np.cos(r), np.sin(r)
    return np.array([
        [ch * cr + sh * sp * sr, sh * cp, ch * sr - sh * sp * cr],
        [-sh * cr + ch * sp * sr, ch * cp, -sh * sr - ch * sp * cr],
        [-cp * sr, sp, cp * cr],
    ])


def _rotate(instrument, heading, pitch, roll, encoding):
    single = np.ndim(instrument) == 1
    instrument = np.atleast_2d(np.array(instrument, dtype=float))
    result = np.full((instrument.shape[0], 4), BAD_VELOCITY)
    if instrument.shape[0] == 0:
        return result[0] if single else result

    xyz = instrument[:, :3]
    if Encoding(encoding) == Encoding.NATIVE:
        # Native axes are swapped and Z points down relative to PD0
        xyz = np.column_stack([xyz[:, 1], xyz[:, 0], -xyz[:, 2]])

    good = ~bad_velocity_mask(instrument[:, :3]).any(axis=1)
    rotation = earth_rotation_matrix(heading, pitch, roll)
    result[good, :3] = xyz[good] @ rotation.T
    if instrument.shape[1] > 3:
        result[good, 3] = instrument[good, 3]
    return result[0] if single else result


def instrument_to_earth(instrument, heading, pitch, roll, encoding=Encoding.NATIVE):
    """Rotate instrument velocity into east, north, vertical (and Q)."""
    return _rotate(instrument, heading, pitch, roll, encoding)


def instrument_to_ship(instrument, pitch, roll, encoding=Encoding.NATIVE):
    """Rotate instrument velocity into transverse, longitudinal, normal.

    The ship frame is the earth rotation with the heading held at zero.
    """
    return _rotate(instrument, 0.0, pitch, roll, encoding)


def velocity_vectors(earth) -> np.ndarray:
    """Magnitude and direction (degrees from north, 0..360) per row."""
    earth = np.atleast_2d(np.array(earth, dtype=float))
    result = np.full((earth.shape[0], 2), BAD_VELOCITY)
    if earth.shape[0] == 0 or earth.shape[1] < 3:
        return result
    good = ~bad_velocity_mask(earth[:, :3]).any(axis=1)
    east, north, vert = earth[good, 0], earth[good, 1], earth[good, 2]
    result[good, 0] = np.sqrt(east ** 2 + north ** 2 + vert ** 2)
    result[good, 1] = np.mod(np.degrees(np.arctan2(east, north)), 360.0)
    return result
