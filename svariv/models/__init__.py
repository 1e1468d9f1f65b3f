"""
SVAR-IV Toolbox Models Module

Model families of the toolbox. The svar subpackage implements inference for
structural VARs identified with an external instrument.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("svariv.models")

from . import svar

__all__ = ['svar']
