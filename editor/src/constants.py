"""
LayerMaster - Constants and Configuration

This module contains all constant values used throughout the application:
- Transparency keying threshold
- Default transform settings
- Canvas sizing and viewport caps
- Placeholder and overlay colors
- Slider ranges
- Export filenames
- Generative render settings
"""

# ======================================================================
# TRANSPARENCY KEYING
# ======================================================================

# A pixel is "white" when R, G and B are all strictly above this value
KEY_THRESHOLD = 240

# ======================================================================
# DEFAULT TRANSFORM
# ======================================================================

# Offset from canvas center, in output pixels
DEFAULT_POSITION_X = 0.0
DEFAULT_POSITION_Y = 0.0

# Uniform foreground scale applied on every object load
DEFAULT_SCALE = 0.5

# Rotation in degrees, clockwise on screen
DEFAULT_ROTATION = 0.0

DEFAULT_OPACITY = 1.0
DEFAULT_REMOVE_WHITE = False

# ======================================================================
# CANVAS
# ======================================================================

# Canvas size before any background has been loaded
DEFAULT_CANVAS_WIDTH = 800
DEFAULT_CANVAS_HEIGHT = 600

# Canvas is fitted inside this box when a background is loaded
VIEWPORT_MAX_WIDTH = 1000
VIEWPORT_REFERENCE_HEIGHT = 900
VIEWPORT_HEIGHT_RATIO = 0.85
VIEWPORT_MAX_HEIGHT = int(VIEWPORT_REFERENCE_HEIGHT * VIEWPORT_HEIGHT_RATIO)

# ======================================================================
# PLACEHOLDER (no background loaded)
# ======================================================================

PLACEHOLDER_GRADIENT_TOP = (0x0f, 0x17, 0x2a)     # #0f172a
PLACEHOLDER_GRADIENT_BOTTOM = (0x1e, 0x29, 0x3b)  # #1e293b
PLACEHOLDER_GRID_SIZE = 40
PLACEHOLDER_GRID_COLOR = (255, 255, 255, 8)       # rgba(255,255,255,0.03)
PLACEHOLDER_TEXT_PRIMARY = "1. Load a background image"
PLACEHOLDER_TEXT_SECONDARY = "2. Place an object on top"

# ======================================================================
# SELECTION OVERLAY
# ======================================================================

SELECTION_COLOR = '#818cf8'
SELECTION_LINE_WIDTH = 2
SELECTION_HANDLE_SIZE = 10
SELECTION_DASH_PATTERN = [4, 2]  # In units of line width (8px dash, 4px gap)

# ======================================================================
# UI CONSTRAINTS
# ======================================================================

SLIDER_SCALE_MIN = 0.1
SLIDER_SCALE_MAX = 3.0
SLIDER_SCALE_STEP = 0.05
SLIDER_ROTATION_MIN = 0
SLIDER_ROTATION_MAX = 360
SLIDER_OPACITY_MIN = 0.0
SLIDER_OPACITY_MAX = 1.0

CONTROL_PANEL_WIDTH = 320

# ======================================================================
# FILE FORMATS
# ======================================================================

IMAGE_FILE_FILTER = "Images (*.png *.jpg *.jpeg *.webp *.bmp *.gif);;All Files (*)"
PNG_FILE_FILTER = "PNG Files (*.png);;All Files (*)"

MANUAL_EXPORT_FILENAME = 'composicion-manual.png'
AI_EXPORT_FILENAME = 'render-realista-ia.png'

# ======================================================================
# GENERATIVE RENDER
# ======================================================================

AI_MODEL = 'gemini-2.5-flash-image'
AI_MODEL_ENV_VAR = 'LAYERMASTER_AI_MODEL'
AI_API_KEY_ENV_VARS = ('GEMINI_API_KEY', 'GOOGLE_API_KEY', 'API_KEY')

AI_RENDER_PROMPT = (
    "ACT AS: Expert CGI Compositor. "
    "TASK: Create a photorealistic photo from this composite. "
    "The input is a foreground object superimposed on a background. "
    "1. Fix Perspective: Warp the foreground object to match the background vanishing point. "
    "2. Fix Lighting: Relight the object to match the background light source and cast "
    "realistic shadows on the ground. "
    "3. Blend: Match white balance and grain, and clean up jagged edges from the cutout. "
    "Keep the identity of the object and of the background location so the result reads "
    "as a single coherent photograph. Output only the final image."
)
