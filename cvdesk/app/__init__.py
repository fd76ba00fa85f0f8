"""Application composition layer for the command line client.

The controller in this package wires settings, the operator session,
adapters and workflows; ``main`` drives them from ``argparse`` commands.
"""
