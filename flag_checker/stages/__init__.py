"""flag_checker.stages — the pixel analysis pipeline.

Each module is a pure function of (Raster, ValidationConfig, earlier stage
output). Stages raise NotTargetImageError or DetectionFailure; they never
build report entries themselves.
"""
