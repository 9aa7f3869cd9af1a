import os
import sys

os.environ.setdefault("MPLBACKEND", "Agg")
os.environ["HEAT1D_USETEX"] = "no"

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
