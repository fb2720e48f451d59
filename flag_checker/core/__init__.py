"""flag_checker.core — Foundation layer.

Contains the reference palette, type definitions, configuration, the raster
loader and the report assembler.
This module has NO dependencies on flag_checker.stages, flag_checker.checks or
flag_checker.registry. Only stdlib, numpy, PIL and cairosvg are allowed here.
"""
