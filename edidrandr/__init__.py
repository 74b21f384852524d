"""Configure xrandr outputs by EDID substring."""
