"""
layout package

Qt-free layout model: node store, geometry, hierarchy edits, the pointer
state machine, snapshots and the editing session.
"""
