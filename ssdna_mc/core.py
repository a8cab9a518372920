"""
Core geometric utilities for freely-jointed chain moves.

This module provides the rotations used by the proposal kernels:
Rodrigues' formula for rotating bead vectors, axis-angle rotation
matrices, and random directions / small random rotations drawn from an
explicit torch.Generator.
"""

import math

import torch


def rodrigues_rotation(
    v: torch.Tensor,
    k: torch.Tensor,
    theta: torch.Tensor | float,
    vector_dim: int = -1
) -> torch.Tensor:
    """
    Rotate vectors using Rodrigues' rotation formula.

    Implements the rotation of vector v around axis k by angle theta:
        v_rot = v*cos(θ) + (k × v)*sin(θ) + k*(k·v)*(1 - cos(θ))

    Args:
        v: Vectors to rotate, shape (..., 3)
        k: Rotation axes (will be normalized), broadcastable to v
        theta: Rotation angles in radians, broadcastable to v
        vector_dim: Dimension along which vector components (x,y,z) lie

    Returns:
        Rotated vectors, same shape as v

    Example:
        >>> v = torch.tensor([[1.0, 0.0, 0.0]])  # x-axis, shape (1, 3)
        >>> k = torch.tensor([[0.0, 0.0, 1.0]])  # z-axis
        >>> rodrigues_rotation(v, k, math.pi / 2)
        tensor([[0., 1., 0.]])  # rotated to y-axis
    """
    k_norm = k / torch.linalg.norm(k, dim=vector_dim, keepdim=True)
    k_norm = k_norm.expand_as(v)
    theta = torch.as_tensor(theta, dtype=v.dtype, device=v.device)

    cos_theta = torch.cos(theta)
    sin_theta = torch.sin(theta)

    # Term 1: Component parallel to rotation
    term1 = v * cos_theta

    # Term 2: Component perpendicular to k (cross product)
    term2 = torch.linalg.cross(k_norm, v, dim=vector_dim) * sin_theta

    # Term 3: Component parallel to k (dot product)
    dot_product = torch.sum(k_norm * v, dim=vector_dim, keepdim=True)
    term3 = k_norm * dot_product * (1 - cos_theta)

    return term1 + term2 + term3


def rotation_matrix(axis: torch.Tensor, theta: torch.Tensor | float) -> torch.Tensor:
    """
    Rotation matrix for a rotation about `axis` by `theta` (right hand rule).

    Built by rotating the standard basis with Rodrigues' formula, so
    `R @ v` equals `rodrigues_rotation(v, axis, theta)`.

    Args:
        axis: Rotation axis, shape (3,), need not be normalized
        theta: Rotation angle in radians

    Returns:
        Rotation matrix, shape (3, 3)
    """
    basis = torch.eye(3, dtype=axis.dtype, device=axis.device)
    # Rows of the rotated basis are the columns of R
    return rodrigues_rotation(basis, axis.view(1, 3), theta).T


def random_unit_vector(
    generator: torch.Generator,
    dtype: torch.dtype = torch.float64,
    device: torch.device | str = "cpu"
) -> torch.Tensor:
    """
    Uniformly distributed direction on the unit sphere, shape (3,).

    A normalized isotropic Gaussian draw.
    """
    while True:
        delta = torch.randn(3, generator=generator, dtype=dtype, device=device)
        norm = torch.linalg.norm(delta)
        if norm > 0:
            return delta / norm


def random_rotation_matrix(
    max_angle: float,
    generator: torch.Generator,
    dtype: torch.dtype = torch.float64,
    device: torch.device | str = "cpu"
) -> torch.Tensor:
    """
    Random rotation with angle magnitude capped at `max_angle`.

    The axis is uniform on the sphere and the angle uniform on
    [-max_angle, max_angle], so R and its inverse are equally likely.

    Args:
        max_angle: Cone half-angle in radians
        generator: Random generator owned by the caller

    Returns:
        Rotation matrix, shape (3, 3)
    """
    axis = random_unit_vector(generator, dtype=dtype, device=device)
    u = torch.rand((), generator=generator, dtype=dtype, device=device)
    theta = (2 * u - 1) * max_angle
    return rotation_matrix(axis, theta)


def random_angle(
    generator: torch.Generator,
    dtype: torch.dtype = torch.float64,
    device: torch.device | str = "cpu"
) -> torch.Tensor:
    """Angle uniform on [0, 2π)."""
    return torch.rand((), generator=generator, dtype=dtype, device=device) * 2 * math.pi
