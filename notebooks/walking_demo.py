# ---
# jupyter:
#   jupytext:
#     formats: ipynb,py:percent
#     text_representation:
#       extension: .py
#       format_name: percent
#       format_version: '1.3'
#   kernelspec:
#     display_name: Python 3
#     language: python
#     name: python3
# ---

# %% [markdown]
# # Optimal walking with the simplest walking model
#
# Short walks of varying length, three candidate objectives, and a walk over a ramp.

# %%
import logging

import numpy as np
import matplotlib.pyplot as plt

from dynamicwalking import (
    WalkRW2l, findgait, onestep, optwalk, optwalktime, optwalkvar, optwalktriangle,
    optwalkslope, setup_logging
)
from dynamicwalking.plotting_helpers import (
    plotvees, plotwork, plot_terrain, plot_comparison, plot_speed_interactive,
    save_optimal_solution
)
from dynamicwalking.terrain import ramp_deltas

setup_logging(logging.WARNING)

# %% [markdown]
# ## Nominal gait

# %%
wstar4 = findgait(WalkRW2l(vm=0.4, P=0.2), target=('speed', 0.4), varying='P')
nominal = onestep(wstar4)
print(wstar4)
print(f"step time {nominal.tf:.4f}, speed {nominal.speed:.4f}, push-off work {nominal.pwork:.5f}")

# %% [markdown]
# ## Short walks of varying length
#
# Start and end at rest, minimize push-off work plus a cost proportional to time.

# %%
ctime = 0.05
walks = {}
for numsteps in range(1, 11):
    walks[numsteps] = optwalktime(wstar4, numsteps, ctime=ctime)

# %%
fig, (ax_speed, ax_work) = plt.subplots(1, 2, figsize=(11, 4))
colors = plt.cm.viridis(np.linspace(0, 0.9, len(walks)))
for color, (numsteps, walk) in zip(colors, walks.items()):
    plotvees(walk, wstar4, ax=ax_speed, color=color, label=f'{numsteps} steps')
    plotwork(walk, ax=ax_work, color=color, label=f'{numsteps} steps')
ax_speed.set_title('Speed')
ax_work.set_title('Push-off work per step')
ax_speed.legend(loc='upper right', fontsize='x-small', ncol=2)
fig.tight_layout()

# %%
for numsteps, walk in walks.items():
    print(f"{numsteps:2d} steps: total time {walk.totaltime:7.3f}, total work {walk.totalcost:.5f}, "
          f"peak speed {np.max(walk.vms):.4f}")

# %% [markdown]
# ## Comparison of objectives
#
# Same number of steps and the same total time for all three.

# %%
numsteps = 10
walktime = walks[numsteps]
walkvar = optwalkvar(wstar4, numsteps, totaltime=walktime.totaltime)
walktriangle = optwalktriangle(wstar4, numsteps, totaltime=walktime.totaltime)

comparison = {'work + time': walktime, 'min variance': walkvar, 'triangle': walktriangle}
fig = plot_comparison(comparison, wstar4, colors=['tab:blue', 'tab:orange', 'tab:green'],
                      markers=['o', 's', '^'])

for label, walk in comparison.items():
    print(f"{label:12s}: total work {walk.totalcost:.5f}, total time {walk.totaltime:.3f}")

# %% [markdown]
# ## Walking up a ramp

# %%
rampsteps = 15
deltas = ramp_deltas(rampsteps, angle=0.08)
walkramp = optwalkslope(wstar4, deltas=deltas)
walkflat = optwalk(wstar4, rampsteps, totaltime=walkramp.totaltime)

fig, (ax_terrain, ax_speed, ax_work) = plt.subplots(3, 1, figsize=(7, 9))
plot_terrain(walkramp, wstar4, ax=ax_terrain)
plotvees(walkflat, wstar4, ax=ax_speed, color='gray', marker='.', label='level')
plotvees(walkramp, wstar4, ax=ax_speed, color='tab:red', label='ramp')
plotwork(walkflat, ax=ax_work, color='gray', marker='.', label='level')
plotwork(walkramp, ax=ax_work, color='tab:red', label='ramp')
ax_speed.legend(loc='best')
ax_work.legend(loc='best')
fig.tight_layout()

print(f"ramp work {walkramp.totalcost:.5f} vs. level work {walkflat.totalcost:.5f}")

# %%
plot_speed_interactive({'ramp': walkramp, 'level': walkflat}, wstar4,
                       filepath='out/interactive_ramp_speeds.html')
save_optimal_solution(walkramp, filepath='out/optimal_ramp_walk.txt')
plt.show()
