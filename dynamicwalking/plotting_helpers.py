import os
from typing import Dict, Optional

import numpy as np
import matplotlib.pyplot as plt
import plotly.graph_objects as go

from dynamicwalking.results import MultiStepResult, speed_trajectory
from dynamicwalking.terrain import elevations, foothold_positions
from dynamicwalking.walker import WalkRW2l, step_length


def _ensure_dir(filepath):
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)


def plotvees(result: MultiStepResult, walker: WalkRW2l, ax=None, color='C0', label=None,
             marker='o', continuous=True, speedtype='midstance'):
    """
    Speed vs. time of a walk.

    Args:
        continuous: draw the full center of mass speed between mid-stances
        speedtype: 'midstance' marks mid-stance speeds, 'step' marks average
            step speeds at the middle of each step
    """
    if ax is None:
        _, ax = plt.subplots()

    if continuous:
        t, v = speed_trajectory(walker, result)
        ax.plot(t, v, color=color, linewidth=1, alpha=0.6)

    if speedtype == 'midstance':
        ax.plot(result.midstance_times, result.vms, color=color, marker=marker,
                linestyle='' if continuous else '-', label=label)
    elif speedtype == 'step':
        tmid = result.tstarts + result.tfs / 2
        ax.plot(tmid, result.speeds, color=color, marker=marker,
                linestyle='' if continuous else '-', label=label)
    else:
        raise ValueError(f"Unknown speed type '{speedtype}'")

    ax.set_xlabel('Time')
    ax.set_ylabel('Speed')
    return ax


def plotwork(result: MultiStepResult, ax=None, color='C0', label=None, marker='o',
             include_collisions=False):
    """Push-off work vs. step number"""
    if ax is None:
        _, ax = plt.subplots()

    steps = np.arange(1, result.numsteps + 1)
    ax.plot(steps, result.pworks, color=color, marker=marker, label=label)
    if include_collisions:
        ax.plot(steps, result.cworks, color=color, marker=marker, linestyle='--',
                fillstyle='none')
        ax.axhline(0, color='gray', linewidth=0.5)

    ax.set_xlabel('Step')
    ax.set_ylabel('Push-off work')
    return ax


def plot_terrain(result: MultiStepResult, walker: WalkRW2l, ax=None, color='k'):
    """Foothold elevations of a walk over sloped ground"""
    if ax is None:
        _, ax = plt.subplots()

    sl = step_length(walker)
    x = foothold_positions(result.deltas, sl)
    z = elevations(result.deltas, sl)
    ax.plot(x, z, color=color, marker='|')
    ax.fill_between(x, z, z.min() - 0.1 * sl, color='lightgray')
    ax.set_xlabel('Distance')
    ax.set_ylabel('Elevation')
    ax.set_aspect('equal', adjustable='datalim')
    return ax


def plot_comparison(results: Dict[str, MultiStepResult], walker: WalkRW2l,
                    filepath: Optional[str] = None, colors=None, markers=None):
    """Speed and push-off work of several walks side by side"""
    colors = colors or [f'C{i}' for i in range(len(results))]
    markers = markers or ['o', 's', '^', 'v', 'D', 'x']

    fig, (ax_speed, ax_work) = plt.subplots(1, 2, figsize=(10, 4))
    for i, (label, result) in enumerate(results.items()):
        color = colors[i % len(colors)]
        marker = markers[i % len(markers)]
        plotvees(result, walker, ax=ax_speed, color=color, marker=marker, label=label)
        plotwork(result, ax=ax_work, color=color, marker=marker, label=label)

    ax_speed.legend(loc='best', fontsize='small')
    ax_work.legend(loc='best', fontsize='small')
    fig.tight_layout()

    if filepath:
        _ensure_dir(filepath)
        fig.savefig(filepath)
    return fig


def plot_speed_interactive(results: Dict[str, MultiStepResult], walker: WalkRW2l,
                           filepath: str = 'out/interactive_speeds.html'):
    fig = go.Figure()
    colors = ['blue', 'red', 'green', 'orange', 'purple', 'black']

    for i, (label, result) in enumerate(results.items()):
        color = colors[i % len(colors)]
        t, v = speed_trajectory(walker, result)
        fig.add_trace(go.Scatter(
            x=t, y=v,
            mode='lines',
            name=f'{label} speed',
            line=dict(color=color, width=1),
            opacity=0.6,
        ))
        fig.add_trace(go.Scatter(
            x=result.midstance_times, y=result.vms,
            mode='markers',
            name=f'{label} mid-stance',
            marker=dict(size=8, color=color),
            text=[f'Step {k}' for k in range(result.numsteps + 1)],
        ))

    fig.update_layout(
        title='Walking speed',
        xaxis=dict(title='Time', showgrid=True, gridcolor='lightgray'),
        yaxis=dict(title='Speed', showgrid=True, gridcolor='lightgray'),
        legend=dict(yanchor="top", y=0.99, xanchor="left", x=1.05),
        showlegend=True
    )

    _ensure_dir(filepath)
    fig.write_html(filepath)
    return fig


def save_optimal_solution(result: MultiStepResult, filepath: str = 'out/optimal_solution.txt'):
    _ensure_dir(filepath)

    with open(filepath, 'w') as f:
        f.write(f"Objective: {result.objective}\n")
        f.write(f"Solver: {result.solver}\n")
        f.write(f"Objective Function Optimal Value: {result.objective_value:.6f}\n")
        f.write(f"Total Cost (work): {result.totalcost:.6f}\n")
        f.write(f"Boundary Work: {result.boundarywork:.6f}\n")
        f.write(f"Total Time: {result.totaltime:.6f}\n")
        f.write(f"Boundary Velocities: {result.boundaryvels}\n")
        for name, value in result.extras.items():
            f.write(f"{name}: {value:.6f}\n")

        f.write("\nSteps:\n")
        for i, step in enumerate(result.steps):
            f.write(f"Step {i+1}: vm = {step.vm:.6f}, P = {step.push_off:.6f}, "
                    f"delta = {step.delta:.4f}, tf = {step.tf:.6f}, "
                    f"push-off work = {step.pwork:.6f}, collision work = {step.cwork:.6f}\n")
        f.write(f"Final mid-stance speed: {result.vms[-1]:.6f}\n")
