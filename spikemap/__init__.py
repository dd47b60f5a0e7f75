"""spikemap: animated spike map of county case counts.

Turns a flat date / county / cases log into per-date and per-county
lookups, binds them to projected county centroids, and animates one spike
per county through the dates with a play / pause / seek scrubber:
  - indexing: per-date totals and per-county per-date series
  - scale: square-root spike height scale
  - geometry: centroid binding and static outline layers
  - scrubber: reusable play / pause / loop / ping-pong driver
  - viz.render: per-date frame drawing on a matplotlib canvas
  - app: the object that wires the pipeline together
"""

__version__ = "0.1.0"
