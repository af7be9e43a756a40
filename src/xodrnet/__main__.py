### Top-level functionality of the xodrnet package as a script:
### load an OpenDRIVE map, report on it, and optionally plot it.

import argparse
import sys
import time

import xodrnet.core.errors as errors
from xodrnet.formats.opendrive import OpenDrive, checkConsistency

parser = argparse.ArgumentParser(
    prog="xodrnet",
    usage="xodrnet [-h | --help] [options] FILE [options]",
    description="Compute road geometry and the lane routing graph of an OpenDRIVE map.",
)

mainOptions = parser.add_argument_group("main options")
mainOptions.add_argument(
    "--step",
    type=float,
    default=OpenDrive.defaultStep,
    help=f"spacing of sampled reference points (default {OpenDrive.defaultStep})",
)
mainOptions.add_argument(
    "-v",
    "--verbosity",
    help="verbosity level (default 1)",
    type=int,
    choices=(0, 1, 2, 3),
    default=1,
)
mainOptions.add_argument(
    "--lane",
    default=[],
    action="append",
    metavar="KEY",
    help="show a lane and its neighbors in the routing graph (e.g. 1_0_-1)",
)
mainOptions.add_argument(
    "--strict",
    action="store_true",
    help="fail if the map contains references to missing roads, junctions, or lanes",
)
mainOptions.add_argument(
    "--show", action="store_true", help="plot the lanes of the map with matplotlib"
)

parser.add_argument("xodrFile", help="an OpenDRIVE file", metavar="FILE")


def describeLane(odr, key):
    lane = odr.getLaneByKey(key)
    if lane is None:
        print(f'Lane {key}: not found')
        return False
    print(f'Lane {lane.key}: type {lane.type_}, {len(lane.getBoundaryLine())} boundary points')
    for succ in odr.getSuccessors(lane.key):
        print(f'  successor {succ} ({odr.graph.getEdgeKind(lane.key, succ)})')
    for pred in odr.getPredecessors(lane.key):
        print(f'  predecessor {pred} ({odr.graph.getEdgeKind(pred, lane.key)})')
    return True


def main(argv=None):
    args = parser.parse_args(argv)
    errors.setDebuggingOptions(verbosity=args.verbosity)
    if args.step <= 0:
        parser.error("--step must be positive")

    startTime = time.time()
    try:
        odr = OpenDrive.fromFile(args.xodrFile, step=args.step)
        if args.strict:
            checkConsistency(odr, strict=True)
    except errors.XodrError as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1
    except OSError as e:
        print(f'Error: unable to read {args.xodrFile}: {e}', file=sys.stderr)
        return 1

    header = odr.getHeader()
    if args.verbosity >= 1:
        totalTime = time.time() - startTime
        print(f'Loaded map {header.name or args.xodrFile} in {totalTime:.2f} seconds.')
    roads = odr.getRoads()
    points = sum(len(line) for line in odr.getReferenceLines())
    lanes = len(odr.graph)
    print(f'Roads: {len(roads)}')
    print(f'Junctions: {len(odr.getJunctions())}')
    print(f'Reference points: {points}')
    print(f'Lanes: {lanes}')
    print(f'Routing edges: {odr.graph.edgeCount()}')

    found = all([describeLane(odr, key) for key in args.lane])

    if args.show:
        import matplotlib.pyplot as plt
        from xodrnet.formats.opendrive.plotting import plotLanes, plotReferenceLines

        plotReferenceLines(odr, plt)
        plotLanes(odr, plt)
        plt.gca().set_aspect('equal')
        plt.show()

    return 0 if found else 2


if __name__ == "__main__":
    sys.exit(main())
