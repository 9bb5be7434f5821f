"""
Application Layer

Contains the application services that orchestrate domain objects and
infrastructure adapters to fulfil player use cases.

Structure:
- services/: Playback coordination and library browsing
- interfaces/: Port interfaces for infrastructure adapters (engine, media library)
"""
