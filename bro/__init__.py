"""A build library where the build program is the build script."""

from .cmd import Cmd, CmdPool, CmdQueue, CmdTmpl, Runnable, Task
from .entry import CmdEntry
from .exceptions import BroError, RebuildError
from .files import Directory, File
from .module import EXE, LIB, SO, Module
from .orchestrator import Bro
from .registry import NOT_FOUND, Registry
from .stages import Link, Stage, Transform
from .template import Template
