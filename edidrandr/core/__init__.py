"""Discovery, matching and profile handling for edidrandr."""
