"""Interactive display and control loop for the RealSense viewer."""
