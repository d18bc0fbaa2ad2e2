"""Analysis scripts which turn derived collections into tables and counts."""

from .event import *
from .vertex_count import *
from .vertex_tree import *
