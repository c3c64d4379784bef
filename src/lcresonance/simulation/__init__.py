"""
The SIMULATION layer advances the model over time: kinematics of the charge
carriers, the per-frame driver, the rolling history and the frame loop.
"""
