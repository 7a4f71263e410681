import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation

from fwiprop.modeling import (
    AcousticForwardPropagator,
    ReceiverArray,
    SourceWavelet,
    TimeAxis,
    circle_model,
    receiver_line,
)
from fwiprop.plotting import plot_shotrecord, plot_velocity

# Physical parameters (m, km/s, ms, kHz)
MODEL = {
    "shape": (101, 101),
    "spacing": (10.0, 10.0),
    "nbl": 40,
    "vp_background": 2.5,
    "vp_circle": 3.0,
}
SOURCE = {
    "coordinates": [(500.0, 20.0)],
    "f0": 0.010,
}
RECEIVERS = {
    "start": (0.0, 980.0),
    "end": (1000.0, 980.0),
    "npoint": 101,
}
TN = 1000.0
SPACE_ORDER = 4
SNAPSHOT_EVERY = 5


model = circle_model(
    MODEL["shape"],
    MODEL["spacing"],
    vp_background=MODEL["vp_background"],
    vp_circle=MODEL["vp_circle"],
    nbl=MODEL["nbl"],
)
time_axis = TimeAxis(start=0.0, stop=TN, step=model.critical_dt(SPACE_ORDER))
source = SourceWavelet.ricker(np.array(SOURCE["coordinates"]), time_axis, f0=SOURCE["f0"])
receivers = ReceiverArray(
    receiver_line(RECEIVERS["start"], RECEIVERS["end"], RECEIVERS["npoint"]),
    time_axis.num,
)

propagator = AcousticForwardPropagator(
    model,
    nt=time_axis.num,
    dt=time_axis.step,
    source=source,
    receivers=receivers,
    space_order=SPACE_ORDER,
    log=True,
)

# Collect interior snapshots while propagating
snapshots = []


def record_snapshot(prop, time_index):
    if time_index % SNAPSHOT_EVERY == 0:
        snapshots.append(prop.grid.strip_padding(prop.current()).copy())


propagator.run(callback=record_snapshot, progress=True)

plot_velocity(model, source=source.coordinates, receivers=receivers.coordinates)
plot_shotrecord(propagator.receiver_data, model, time_axis.start, time_axis.stop)

# Wavefield animation, depth pointing down
(x0, x1), (z0, z1) = model.grid.extent
abs_max = max(float(np.max(np.abs(snapshot))) for snapshot in snapshots) or 1.0
fig, ax = plt.subplots()
im = ax.imshow(
    snapshots[0].T,
    cmap="seismic",
    extent=(x0, x1, z1, z0),
    vmin=-abs_max,
    vmax=abs_max,
)
fig.colorbar(im, ax=ax, label="Amplitude")
title = ax.set_title("t = 0.0 ms")
ax.set_xlabel("X position (m)")
ax.set_ylabel("Depth (m)")


def update(frame):
    im.set_data(snapshots[frame].T)
    title.set_text(f"t = {frame * SNAPSHOT_EVERY * time_axis.step:.1f} ms")
    return (im,)


animation = FuncAnimation(fig, update, frames=len(snapshots), interval=50, blit=False)

plt.show()
