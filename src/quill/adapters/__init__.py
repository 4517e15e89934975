"""UI adapters that host an ``EditorSession``."""
