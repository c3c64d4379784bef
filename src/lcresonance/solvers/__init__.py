from lcresonance.solvers.integrator import ExplicitEulerIntegrator

__all__ = ["ExplicitEulerIntegrator"]
