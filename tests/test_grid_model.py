"""
Test script for the grid, the velocity model and the demo models.

Covers the padded geometry, the squared slowness and damping fields, the
critical time step and the synthetic model builders.
"""

import numpy as np
import pytest

from fwiprop.modeling import (
    ConfigError,
    Grid,
    VelocityModel,
    check_velocity,
    circle_model,
    circle_velocity,
    constant_model,
    damping_profile,
    layered_model,
    layered_velocity,
    points_per_wavelength,
    smooth_model,
    stencil_norm,
)


def test_grid_geometry():
    """Padded shape, origins and extent."""
    grid = Grid(shape=(101, 51), spacing=(10.0, 5.0), nbl=20)

    assert grid.ndim == 2
    assert grid.origin == (0.0, 0.0)
    assert grid.padded_shape == (141, 91)
    assert grid.padded_origin == (-200.0, -100.0)
    assert grid.extent == ((0.0, 1000.0), (0.0, 250.0))
    np.testing.assert_allclose(grid.coordinates(1)[-1], 250.0)
    np.testing.assert_allclose(grid.coordinates(0, padded=True)[0], -200.0)
# end def test_grid_geometry


def test_grid_to_padded_index():
    """Physical coordinates map to fractional padded indices."""
    grid = Grid(shape=(11, 11, 11), spacing=(10.0, 10.0, 20.0), origin=(100.0, 0.0, 0.0), nbl=3)
    index = grid.to_padded_index(np.array([[100.0, 0.0, 0.0], [155.0, 20.0, 30.0]]))
    np.testing.assert_allclose(index, [[3.0, 3.0, 3.0], [8.5, 5.0, 4.5]])

    with pytest.raises(ConfigError):
        grid.to_padded_index(np.array([[1.0, 2.0]]))
    # end with
# end def test_grid_to_padded_index


def test_grid_strip_padding_keeps_leading_axes():
    grid = Grid(shape=(5, 6), spacing=(1.0, 1.0), nbl=2)
    history = np.random.default_rng(0).normal(size=(4,) + grid.padded_shape)
    interior = grid.strip_padding(history)
    assert interior.shape == (4, 5, 6)
    np.testing.assert_array_equal(interior[:, 0, 0], history[:, 2, 2])
# end def test_grid_strip_padding_keeps_leading_axes


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(shape=(10,), spacing=(1.0,)),
        dict(shape=(10, 10, 10, 10), spacing=(1.0, 1.0, 1.0, 1.0)),
        dict(shape=(10, 1), spacing=(1.0, 1.0)),
        dict(shape=(10, 10), spacing=(1.0,)),
        dict(shape=(10, 10), spacing=(1.0, -1.0)),
        dict(shape=(10, 10), spacing=(1.0, 1.0), nbl=-1),
        dict(shape=(10, 10), spacing=(1.0, 1.0), origin=(0.0,)),
    ],
)
def test_grid_invalid(kwargs):
    """Inconsistent geometries raise ConfigError."""
    with pytest.raises(ConfigError):
        Grid(**kwargs)
    # end with
# end def test_grid_invalid


def test_velocity_model_fields():
    """m = 1/vp**2 on the padded grid with edge-extended velocities."""
    vp = np.full((21, 31), 2.0)
    vp[:, 15:] = 4.0
    model = VelocityModel.from_array(vp, spacing=(10.0, 10.0), nbl=5)

    assert model.m.shape == (31, 41)
    assert model.m[10, 10] == pytest.approx(0.25)
    assert model.m[10, 30] == pytest.approx(1.0 / 16.0)
    # Padding copies the nearest interior velocity
    assert model.m[0, 0] == pytest.approx(0.25)
    assert model.m[0, -1] == pytest.approx(1.0 / 16.0)
    assert model.min_velocity == 2.0
    assert model.max_velocity == 4.0
    assert "VelocityModel(2D" in str(model)
# end def test_velocity_model_fields


def test_velocity_model_is_read_only():
    model = constant_model((11, 11), (10.0, 10.0), vp=1.5, nbl=4)
    for array in (model.vp, model.m, model.damp, model.sigma):
        assert not array.flags.writeable
    # end for
# end def test_velocity_model_is_read_only


def test_damping_zero_inside_and_monotonic_outside():
    """The damping vanishes in the physical domain and grows towards the edges."""
    nbl = 10
    model = constant_model((21, 25), (10.0, 10.0), vp=2.0, nbl=nbl)
    damp = model.damp

    assert np.all(model.grid.strip_padding(damp) == 0.0)
    assert np.all(damp >= 0.0)

    middle = damp.shape[1] // 2
    left = damp[: nbl + 1, middle]
    right = damp[-nbl - 1:, middle]
    assert np.all(np.diff(left) < 0.0)
    assert np.all(np.diff(right) > 0.0)
    # Corners accumulate both axes
    assert damp[0, 0] == pytest.approx(2.0 * damp[0, middle])
# end def test_damping_zero_inside_and_monotonic_outside


def test_damping_profile_edge_value():
    """The outer rate is 3 c log(1/R) / (2 L)."""
    profile = damping_profile(20, 10.0, 3.0, 1e-3)
    assert profile.shape == (20,)
    assert profile[-1] == pytest.approx(3.0 * 3.0 * np.log(1e3) / (2.0 * 200.0))
    assert damping_profile(0, 10.0, 3.0).size == 0
# end def test_damping_profile_edge_value


def test_no_padding_means_no_damping():
    model = constant_model((11, 11), (10.0, 10.0), nbl=0)
    assert model.m.shape == (11, 11)
    assert not np.any(model.damp)
# end def test_no_padding_means_no_damping


@pytest.mark.parametrize(
    "vp",
    [
        np.zeros((10, 10)),
        np.full((10, 10), -1.0),
        np.full((10, 10), np.nan),
        np.full((10, 10), np.inf),
    ],
)
def test_velocity_model_rejects_invalid_velocity(vp):
    with pytest.raises(ConfigError):
        VelocityModel.from_array(vp, spacing=(1.0, 1.0), nbl=2)
    # end with
# end def test_velocity_model_rejects_invalid_velocity


def test_velocity_model_shape_mismatch():
    grid = Grid(shape=(10, 12), spacing=(1.0, 1.0), nbl=2)
    with pytest.raises(ConfigError):
        VelocityModel(np.ones((12, 10)), grid)
    # end with
# end def test_velocity_model_shape_mismatch


def test_critical_dt_formula():
    """0.9 * 2 / (vmax * sqrt(sum S / h**2))."""
    model = constant_model((11, 11), (10.0, 20.0), vp=2.0, nbl=2)
    for space_order in (2, 4, 8):
        norm = stencil_norm(space_order)
        expected = 0.9 * 2.0 / (2.0 * np.sqrt(norm / 100.0 + norm / 400.0))
        assert model.critical_dt(space_order) == pytest.approx(expected)
    # end for

    # Wider stencils are more restrictive
    assert model.critical_dt(8) < model.critical_dt(4) < model.critical_dt(2)
    assert model.critical_dt(2, courant=1.0) == pytest.approx(model.critical_dt(2) / 0.9)

    with pytest.raises(ConfigError):
        model.critical_dt(2, courant=1.5)
    # end with
# end def test_critical_dt_formula


def test_critical_dt_scales_with_velocity():
    slow = constant_model((11, 11), (10.0, 10.0), vp=1.5, nbl=2)
    fast = constant_model((11, 11), (10.0, 10.0), vp=3.0, nbl=2)
    assert slow.critical_dt() == pytest.approx(2.0 * fast.critical_dt())
# end def test_critical_dt_scales_with_velocity


def test_layered_velocity():
    """Layers stack along the last (depth) axis."""
    vp = layered_velocity((4, 10), [(3, 1.5), (2, 2.0), (0, 3.0)])
    assert vp.shape == (4, 10)
    np.testing.assert_array_equal(vp[:, :3], 1.5)
    np.testing.assert_array_equal(vp[:, 3:5], 2.0)
    np.testing.assert_array_equal(vp[:, 5:], 3.0)

    model = layered_model((4, 10), (10.0, 10.0), [(5, 1.5), (5, 2.5)], nbl=2)
    assert model.max_velocity == 2.5
# end def test_layered_velocity


@pytest.mark.parametrize(
    "layers",
    [
        [],
        [(3, 1.5)],
        [(12, 1.5)],
        [(0, 1.5), (10, 2.0)],
        [(-1, 1.5), (0, 2.0)],
        [(10, 1.5), (0, 2.0)],
    ],
)
def test_layered_velocity_invalid(layers):
    with pytest.raises(ConfigError):
        layered_velocity((4, 10), layers)
    # end with
# end def test_layered_velocity_invalid


def test_circle_velocity():
    vp = circle_velocity((101, 101), (10.0, 10.0), vp_background=2.5, vp_circle=3.0, radius=150.0)
    assert vp[50, 50] == 3.0
    assert vp[0, 0] == 2.5
    assert vp[50, 50 + 15] == 3.0
    assert vp[50, 50 + 16] == 2.5

    model = circle_model((51, 41), (10.0, 10.0), nbl=5)
    assert model.min_velocity == 2.5
    assert model.max_velocity == 3.0
# end def test_circle_velocity


def test_smooth_model_stays_within_bounds():
    true_model = circle_model((61, 61), (10.0, 10.0), radius=100.0, nbl=5)
    smooth = smooth_model(true_model, sigma=4.0)

    assert smooth.grid == true_model.grid
    assert smooth.min_velocity >= true_model.min_velocity - 1e-12
    assert smooth.max_velocity <= true_model.max_velocity + 1e-12
    assert smooth.max_velocity < true_model.max_velocity
    np.testing.assert_allclose(smooth_model(true_model, sigma=0.0).vp, true_model.vp)
# end def test_smooth_model_stays_within_bounds


def test_smooth_model_keeps_the_absorbing_layer():
    vp = np.full((31, 31), 2.0)
    vp[:, 15:] = 3.0
    model = VelocityModel.from_array(vp, (10.0, 10.0), nbl=8, reflection_coefficient=1e-5)
    assert model.reflection_coefficient == 1e-5

    # Without smoothing the velocity, and therefore the damping, is unchanged
    same = smooth_model(model, sigma=0.0)
    assert same.reflection_coefficient == 1e-5
    np.testing.assert_allclose(same.damp, model.damp)

    default = VelocityModel.from_array(vp, (10.0, 10.0), nbl=8)
    assert not np.allclose(same.damp, default.damp)
    assert smooth_model(model, sigma=2.0).reflection_coefficient == 1e-5
# end def test_smooth_model_keeps_the_absorbing_layer


def test_check_velocity():
    vp = check_velocity([[1.5, 2.0], [2.5, 3.0]], min_v=1.0, max_v=4.0, verbose=True)
    assert vp.dtype == np.float64

    with pytest.raises(ConfigError):
        check_velocity(np.array([]))
    # end with
    with pytest.raises(ConfigError):
        check_velocity([[1.5, 5.0]], max_v=4.0)
    # end with
    with pytest.raises(ConfigError):
        check_velocity([[0.5, 2.0]], min_v=1.0)
    # end with
# end def test_check_velocity


def test_points_per_wavelength():
    # 1.5 km/s at 2.5 * 10 Hz gives a 60 m wavelength
    assert points_per_wavelength(1.5, 0.010, 10.0) == pytest.approx(6.0)
    with pytest.raises(ConfigError):
        points_per_wavelength(1.5, 0.0, 10.0)
    # end with
# end def test_points_per_wavelength
