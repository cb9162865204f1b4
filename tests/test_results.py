import numpy as np
import pytest

from dynamicwalking.results import MultiStepResult, speed_trajectory


def test_speed_trajectory_hits_step_speeds(steady_walk, walker):
    t, v = speed_trajectory(walker, steady_walk, npts=10)
    assert len(t) == len(v) == 4 * 2 * 10
    assert np.all(np.diff(t) >= -1e-12)
    step = steady_walk.steps[0]
    assert v[0] == pytest.approx(step.vm)
    assert v[9] == pytest.approx(step.v_minus)
    assert v[10] == pytest.approx(step.v_plus)
    assert v[19] == pytest.approx(step.vm_next, abs=1e-9)
    # lowest speed is at mid-stance
    assert v.min() == pytest.approx(walker.vm, abs=1e-9)


def test_speed_trajectory_skips_failed_steps(walker):
    assert len(speed_trajectory(walker, MultiStepResult())[0]) == 0


def test_result_arrays(steady_walk):
    assert len(steady_walk) == 4
    assert steady_walk.vms.shape == (5,)
    assert steady_walk.pushoffs.shape == (4,)
    assert steady_walk.midstance_times[-1] == pytest.approx(steady_walk.totaltime)
    assert steady_walk.average_speed == pytest.approx(
        steady_walk.total_distance / steady_walk.totaltime)
    assert "simulation: 4 steps" in steady_walk.summary()


def test_empty_result():
    msr = MultiStepResult(vm0=0.3)
    np.testing.assert_array_equal(msr.vms, [0.3])
    assert np.isnan(msr.average_speed)
