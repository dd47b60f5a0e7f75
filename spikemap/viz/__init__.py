"""spikemap visualization.

Modules:
  - style: palette and logical-canvas figure helpers
  - render: per-date frame drawing (FrameRenderer)
  - controls: Play / Pause button and slider bound to a Scrubber
  - animations: headless GIF export
"""
