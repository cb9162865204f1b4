import runpy
from pathlib import Path

import numpy as np
import pytest

from dynamicwalking.config import SolverSettings
from dynamicwalking.constraints import constraint_violations
from dynamicwalking.optimization import (
    optwalk, optwalktime, optwalkvar, optwalktriangle, optwalkslope,
    setup_walk, set_initial_guess, default_total_time, steady_speed_for_time, REST,
    OptimizationFailure
)
from dynamicwalking.terrain import ramp_deltas
from dynamicwalking.gait import findgait
from dynamicwalking.walker import WalkRW2l, multistep, steady_step_time


def test_optwalk_steady_boundaries(walker):
    numsteps = 4
    result = optwalk(walker, numsteps)
    steady = multistep(walker, [walker.P] * numsteps)

    assert result.success
    assert result.objective == 'work'
    assert result.totaltime == pytest.approx(steady.totaltime, abs=1e-5)
    assert result.vms[0] == pytest.approx(walker.vm, abs=1e-6)
    assert result.vms[-1] == pytest.approx(walker.vm, abs=1e-5)
    # steady walking is feasible, so the optimum is no worse
    assert result.totalcost <= steady.totalcost + 1e-6
    np.testing.assert_allclose(result.vms, walker.vm, atol=1e-2)


def test_optwalk_shorter_time_costs_more(walker):
    nominal = optwalk(walker, 3)
    faster = optwalk(walker, 3, totaltime=0.9 * default_total_time(walker, 3))
    assert faster.totaltime == pytest.approx(0.9 * nominal.totaltime, abs=1e-5)
    assert faster.totalcost > nominal.totalcost


def test_optwalk_from_rest_needs_boundary_work(walker):
    with pytest.raises(ValueError):
        optwalk(walker, 3, boundaryvels=REST, boundarywork=False)


def test_optwalktime_from_rest(walker):
    result = optwalktime(walker, 5, ctime=0.05)
    assert result.success
    assert result.objective == 'time'
    assert result.extras['ctime'] == 0.05
    assert result.boundarywork > 0
    assert np.all(result.pushoffs >= -1e-8)
    assert np.all(np.isfinite(result.vms))
    assert result.totalcost == pytest.approx(result.total_pwork + result.boundarywork)


def test_optwalktime_higher_time_cost_walks_faster(walker):
    slow = optwalktime(walker, 4, ctime=0.02)
    fast = optwalktime(walker, 4, ctime=0.2)
    assert fast.totaltime < slow.totaltime


def test_optwalkvar_fixed_time(walker):
    totaltime = default_total_time(walker, 5)
    result = optwalkvar(walker, 5)
    assert result.objective == 'variance'
    assert result.totaltime == pytest.approx(totaltime, abs=1e-5)


def test_optwalktriangle_peaks_in_middle(walker):
    result = optwalktriangle(walker, 6)
    assert result.objective == 'triangle'
    assert result.extras['vpeak'] > 0
    peak = int(np.argmax(result.vms))
    assert 2 <= peak <= 4


def test_optwalkslope_default_ramp(walker):
    result = optwalkslope(walker, 9)
    np.testing.assert_allclose(result.deltas, ramp_deltas(9))
    assert result.objective == 'slope'
    assert result.totaltime == pytest.approx(default_total_time(walker, 9, ramp_deltas(9)), abs=1e-5)


def test_optwalkslope_with_time_cost(walker):
    deltas = ramp_deltas(6, length=2, angle=0.05)
    result = optwalkslope(walker, deltas=deltas, ctime=0.05)
    assert result.numsteps == 6
    assert result.extras['ctime'] == 0.05


def test_setup_walk_warm_start_satisfies_dynamics(walker):
    state = setup_walk(walker, 3, 'work', None, False, default_total_time(walker, 3),
                       None, SolverSettings(), None)
    set_initial_guess(state)
    guess = state.prog.GetInitialGuess(state.v)
    np.testing.assert_allclose(guess, walker.vm, atol=1e-8)
    assert len(state.dynamics_constraints) == 2 * 3
    assert len(state.step_time_constraints) == 2 * 3
    assert len(state.boundary_constraints) == 2
    assert len(state.time_constraints) == 1

    x0 = state.prog.GetInitialGuess(state.prog.decision_variables())
    assert np.all(np.isfinite(x0))
    for binding in state.prog.GetAllConstraints():
        value = state.prog.EvalBinding(binding, x0)
        lb = binding.evaluator().lower_bound()
        ub = binding.evaluator().upper_bound()
        assert np.all(value >= lb - 1e-8), binding.evaluator().get_description()
        assert np.all(value <= ub + 1e-8), binding.evaluator().get_description()


def test_steady_speed_for_time(walker):
    deltas = np.zeros(4)
    vm = steady_speed_for_time(walker, deltas, 4 * steady_step_time(walker, 0.5), 0.02, 3.0)
    assert vm == pytest.approx(0.5, abs=1e-8)


def test_solver_settings_validation():
    with pytest.raises(ValueError):
        SolverSettings(solver='gurobi')


def test_named_solver(walker):
    result = optwalk(walker, 2, settings=SolverSettings(solver='ipopt'))
    assert result.success


def test_optwalk_impossible_time_fails(walker):
    # fixed boundary speeds cannot cover three steps this fast within vm_max
    with pytest.raises(OptimizationFailure) as excinfo:
        optwalk(walker, 3, totaltime=0.05)
    state = excinfo.value.state
    assert state is not None
    assert state.objective == 'work'
    assert state.result is not None
    assert not state.result.is_success()


def test_solver_error_becomes_optimization_failure(walker, monkeypatch):
    def failing_solve(prog):
        raise RuntimeError("log(-1) : numerical argument out of domain")

    monkeypatch.setattr('dynamicwalking.optimization.Solve', failing_solve)
    with pytest.raises(OptimizationFailure, match="out of domain") as excinfo:
        optwalk(walker, 2)
    assert excinfo.value.state.result is None
    assert constraint_violations(excinfo.value.state) == []


def _time_then_triangle(w):
    walktime = optwalktime(w, 10, ctime=0.05)
    return optwalktriangle(w, 10, totaltime=walktime.totaltime)


@pytest.mark.parametrize('run, numsteps', [
    (lambda w: optwalktime(w, 1, ctime=0.05), 1),
    (lambda w: optwalktime(w, 10, ctime=0.05), 10),
    (_time_then_triangle, 10),
    (lambda w: optwalkslope(w), 15),
    (lambda w: optwalkslope(w, deltas=ramp_deltas(15, angle=0.08)), 15),
], ids=['time-1', 'time-10', 'triangle-10', 'slope-default', 'slope-ramp'])
def test_demo_walks(run, numsteps):
    w = findgait(WalkRW2l(vm=0.4, P=0.2), target=('speed', 0.4), varying='P')
    result = run(w)
    assert result.success
    assert result.numsteps == numsteps
    assert np.all(np.isfinite(result.vms))
    assert np.all(np.isfinite(result.tfs))
    assert np.all(result.tfs > 0)


def test_walking_demo_notebook_runs(tmp_path, monkeypatch):
    script = Path(__file__).resolve().parents[1] / 'notebooks' / 'walking_demo.py'
    monkeypatch.chdir(tmp_path)
    namespace = runpy.run_path(str(script), run_name='__main__')

    assert sorted(namespace['walks']) == list(range(1, 11))
    assert namespace['walkramp'].numsteps == 15
    assert (tmp_path / 'out' / 'interactive_ramp_speeds.html').exists()
    assert (tmp_path / 'out' / 'optimal_ramp_walk.txt').exists()
