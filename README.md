# depthseg

depthseg segments range (depth) images from rotating 3D laser scanners. It
works on the 2D range image, a NumPy array with one row per laser beam and
one column per horizontal step. It does not work on a 3D point cloud.

It has two main stages:

1. **Ground removal.** `DepthGroundRemover` does the following:
   - fills small gaps in the depth image;
   - computes, for every pixel, the inclination angle to the pixel above it;
   - smooths those angles column by column with a Savitsky-Golay filter;
   - grows the ground region from the lowest valid pixel of each column;
   - dilates that region and sets its pixels to zero.
2. **Clustering.** `LinearImageLabeler` runs a breadth-first search over the
   image and gives each connected component its own label. A pluggable
   difference measure decides whether two neighbouring pixels belong together.
   Columns wrap around, because the scanner sees a full circle. Rows do not
   wrap.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Modules

### `depthseg.abstract_diff`

- `ProjectionAngles(row_angles, col_angles, h_span)` holds the sensor
  geometry, with all angles in radians:
  - one vertical angle per image row;
  - one horizontal angle per image column;
  - the horizontal span of the scan.

  Its `rows` and `cols` properties give the image size that the projection
  expects.
- `AbstractDiff` is the interface for difference measures. It provides
  `diff_at(from_coord, to_coord)`, `satisfies_threshold(value, threshold)`
  and `visualize()`.
- `SimpleDiff` returns the absolute difference of two pixel values. The
  threshold holds when that difference is below it.

### `depthseg.angle_diff` and `depthseg.line_dist_diff`

- `get_beta(alpha, current_depth, neighbor_depth)` returns the incline angle
  of the line through the endpoints of two beams.
- `line_dist(alpha, current_depth, neighbor_depth)` returns the distance
  `d1 * sin(beta)` to that line.
- Each of these measures has two forms:
  - `AngleDiff` and `LineDistDiff` compute the value on demand.
  - `AngleDiffPrecomputed` and `LineDistDiffPrecomputed` compute every row and
    column neighbour once, when the object is built.

  For all four, the threshold holds when the value is *bigger* than it.
- The precomputed forms differ from the on-demand forms in three ways:
  - The image shape must match the projection, otherwise they raise
    `ValueError`.
  - `diff_at` on two identical pixels raises `ValueError`.
  - `visualize()` returns a `uint8` colour image. Channel 0 shows the
    row-wise values and channel 1 the column-wise values.

### `depthseg.diff_factory`

- `DiffType` is an enum with the members `SIMPLE`, `ANGLES`,
  `ANGLES_PRECOMPUTED`, `LINE_DIST`, `LINE_DIST_PRECOMPUTED` and `NONE`.
- `build_diff(diff_type, source_image, params=None)` builds the matching
  helper. It raises `ValueError` in two cases:
  - the type is `NONE`;
  - a measure that needs a projection is built without `params`.

### `depthseg.labeler` and `depthseg.linear_labeler`

- `labels_to_color(label_image)` maps each label to one of 200 fixed colours
  and returns an `(H, W, 3)` `uint8` image.
- `AbstractImageLabeler` provides:
  - the `label_image` property, a `uint16` array in which `0` means
    unlabeled;
  - `set_depth_image(depth_image)`;
  - the abstract method `compute_labels(diff_type)`.
- `LinearImageLabeler(depth_image, params, angle_threshold, step_row=1, step_col=1)`
  provides:
  - `compute_labels(diff_type)`, which starts a new component, numbered from
    1, at every unlabeled pixel whose depth is at least 0.001;
  - `label_one_component(label, start, diff_helper)`, which labels one
    component;
  - the helpers `depth_at`, `label_at`, `set_label` and `wrap_cols`.

### `depthseg.ground_remover`

- `DepthGroundRemover(params, ground_remove_angle=radians(5), window_size=5)`:
  - `remove_ground(depth_image)` returns a copy of the image with ground
    pixels set to zero.
  - `create_angle_image`, `zero_out_ground`, `zero_out_ground_bfs` and
    `line_angle` expose the individual steps.
- Module-level helpers:
  - `savitsky_golay_kernel(window_size)` accepts only 5, 7, 9 or 11 and
    raises `ValueError` for any other size.
  - `uniform_kernel(window_size)` returns a column kernel that averages the
    two pixels at its ends.
  - `apply_savitsky_golay_smoothing(image, window_size)` smooths every column
    of an image.
  - `repair_depth(depth_image, step, depth_threshold)` fills missing depths
    from close pairs of readings above and below.
  - `repair_depth_smooth(depth_image)` fills non-positive depths from a
    column filter.

### `depthseg.communication`

A small publish/subscribe layer for chaining stages.

- `AbstractSender(sender_type)` keeps a set of `AbstractClient` objects:
  - `add_client` subscribes a client. It raises `UndefinedSenderTypeError`
    when the sender's `SenderType` is `UNDEFINED`.
  - `remove_client` unsubscribes a client, given either the client or its id.
  - `client_count` returns the number of subscribed clients.
  - `share_data_with_all_clients(obj, sender_id=-1)` sends `obj` to every
    client, in order of client id.
- Every `Identifiable` receives a unique, increasing `id`.
  `current_id_counter()` returns the last id handed out.

`DepthGroundRemover` is both a client and a `STREAMER` sender:

- `on_new_object_received(depth_image, sender_id)` removes the ground.
- It then shares the resulting depth image with its own clients.

## Example

```python
import math
import numpy as np

from depthseg.abstract_diff import ProjectionAngles
from depthseg.diff_factory import DiffType
from depthseg.ground_remover import DepthGroundRemover
from depthseg.labeler import labels_to_color
from depthseg.linear_labeler import LinearImageLabeler

rows, cols = 16, 360
params = ProjectionAngles(
    row_angles=np.radians(np.linspace(-15.0, 15.0, rows)),
    col_angles=np.radians(np.linspace(-180.0, 180.0, cols, endpoint=False)),
    h_span=2 * math.pi,
)

depth = np.random.uniform(5.0, 10.0, size=(rows, cols)).astype(np.float32)

remover = DepthGroundRemover(params, math.radians(5), 5)
no_ground = remover.remove_ground(depth)

labeler = LinearImageLabeler(no_ground, params, math.radians(10))
labeler.compute_labels(DiffType.ANGLES)
colors = labels_to_color(labeler.label_image)
```

## What it does not do

depthseg works on depth images that are already in memory. It does not do
any of the following:

- read sensor data or files;
- build depth images from point clouds, or point clouds from depth images;
- filter clusters by size;
- display or save results;
- provide a command-line program.

Those parts are left to the code that calls the package.