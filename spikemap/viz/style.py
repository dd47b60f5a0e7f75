"""Light map theme for spikemap figures.

Provides the palette and a figure helper that sets up a canvas in logical
units: x in [0, width], y in [0, height] growing downward, no axes
decorations, sized by the device pixel ratio.
"""

import matplotlib.pyplot as plt

# ═══════════════════════════════════════════════════════════════════════
# COLOR PALETTE
# ═══════════════════════════════════════════════════════════════════════

THEME_COLOR = '#cc0000'
BACKGROUND = '#f3f3f3'
TEXT_COLOR = '#333333'
FIGURE_BG = '#ffffff'


# ═══════════════════════════════════════════════════════════════════════
# THEME HELPERS
# ═══════════════════════════════════════════════════════════════════════

def apply_map_theme(ax, width, height):
    """Fix the axes to logical canvas units and hide all decorations."""
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_aspect('equal', adjustable='box')
    ax.set_axis_off()


def map_figure(width=1200, height=820, device_pixel_ratio=1.0, dpi=100):
    """Create a Figure + full-bleed Axes spanning the logical canvas.

    The pixel size is (width × height) × device_pixel_ratio.
    """
    figsize = (width * device_pixel_ratio / dpi, height * device_pixel_ratio / dpi)
    fig = plt.figure(figsize=figsize, dpi=dpi)
    fig.patch.set_facecolor(FIGURE_BG)
    ax = fig.add_axes([0, 0, 1, 1])
    apply_map_theme(ax, width, height)
    return fig, ax


def save_figure(fig, save_path, dpi=None):
    """Save a figure without trimming the logical canvas."""
    fig.savefig(save_path, dpi=dpi or fig.dpi, facecolor=fig.get_facecolor(),
                edgecolor='none')
    plt.close(fig)
