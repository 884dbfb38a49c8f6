"""Copy-on-write cube surface container."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Literal, Optional, Union

import torch
from torch import Tensor

from torchcube.color import gamma_to_linear, linear_to_gamma
from torchcube.io import (
    DirectDrawSurface,
    DirectDrawSurfaceError,
    image_from_buffer,
)

CubeLayout = Literal[
    "vertical_cross",
    "horizontal_cross",
    "column",
    "row",
    "lat_long",
]


class _CubeSurfaceData:
    """Representation shared by :class:`CubeSurface` handles.

    Tracks how many handles refer to it. The count is guarded by a lock so
    handles may be copied and released from different threads.
    """

    __slots__ = ("edge_length", "faces", "_reference_count", "_lock")

    def __init__(self, edge_length: int = 0, faces: Optional[Tensor] = None):
        self.edge_length = edge_length
        self.faces = faces
        self._reference_count = 0
        self._lock = threading.Lock()

    @property
    def reference_count(self) -> int:
        with self._lock:
            return self._reference_count

    def add_ref(self) -> None:
        with self._lock:
            self._reference_count += 1

    def release(self) -> None:
        with self._lock:
            self._reference_count -= 1

    def clone(self) -> "_CubeSurfaceData":
        faces = None if self.faces is None else self.faces.clone()
        return _CubeSurfaceData(self.edge_length, faces)


def _check_face_index(index: int) -> None:
    if not 0 <= index < 6:
        raise IndexError(f"face index must be in [0, 6), got {index}")


class CubeSurface:
    """Six square float faces forming a cube map.

    Faces are ordered +X, -X, +Y, -Y, +Z, -Z and stored together in a tensor
    of shape ``(6, C, N, N)`` indexed ``[face, channel, y, x]`` with at least
    three channels (R, G, B).

    ``CubeSurface`` has value semantics with copy-on-write sharing.
    ``copy.copy(cube)`` and ``CubeSurface(cube)`` share the representation;
    the first mutating call on a shared handle gives that handle a private
    clone, so no handle ever observes another handle's later mutations.

    Parameters
    ----------
    other : CubeSurface, optional
        Handle to share the representation with. A null cube is created
        when omitted.

    Examples
    --------
    >>> cube = CubeSurface.allocate(16)
    >>> other = copy.copy(cube)
    >>> other.to_linear(2.2)  # cube is unchanged
    """

    def __init__(self, other: Optional[CubeSurface] = None):
        if other is None:
            self._m = _CubeSurfaceData()
        else:
            self._m = other._m
        self._m.add_ref()

    def __del__(self) -> None:
        m = getattr(self, "_m", None)
        if m is not None:
            m.release()
            self._m = None

    def __copy__(self) -> CubeSurface:
        return CubeSurface(self)

    def __deepcopy__(self, memo) -> CubeSurface:
        cube = CubeSurface()
        cube._set_data(self._m.clone())
        return cube

    def __repr__(self) -> str:
        return (
            f"CubeSurface(edge_length={self.edge_length}, "
            f"channels={self.channels})"
        )

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def allocate(
        cls,
        edge_length: int,
        channels: int = 4,
        *,
        dtype: torch.dtype | None = None,
        device: torch.device | None = None,
    ) -> CubeSurface:
        """Zero-initialized cube with ``channels`` channels per face."""
        if edge_length <= 0:
            raise ValueError(
                f"edge_length must be positive, got {edge_length}"
            )
        if channels < 3:
            raise ValueError(f"channels must be >= 3, got {channels}")

        faces = torch.zeros(
            6, channels, edge_length, edge_length, dtype=dtype, device=device
        )
        cube = cls()
        cube._set_data(_CubeSurfaceData(edge_length, faces))
        return cube

    @classmethod
    def from_faces(cls, faces: Tensor) -> CubeSurface:
        """Cube holding a copy of ``faces``, shape ``(6, C, N, N)``."""
        if faces.dim() != 4 or faces.shape[0] != 6:
            raise ValueError(
                f"faces must have shape (6, C, N, N), got {tuple(faces.shape)}"
            )
        if faces.shape[1] < 3:
            raise ValueError(
                f"faces must have at least 3 channels, got {faces.shape[1]}"
            )
        if faces.shape[2] != faces.shape[3] or faces.shape[2] == 0:
            raise ValueError(
                f"faces must be square and non-empty, got {tuple(faces.shape)}"
            )
        if not faces.is_floating_point():
            raise ValueError(
                f"faces must be floating point, got {faces.dtype}"
            )

        cube = cls()
        cube._set_data(
            _CubeSurfaceData(faces.shape[-1], faces.detach().clone())
        )
        return cube

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #

    def is_null(self) -> bool:
        return self._m.edge_length == 0

    @property
    def edge_length(self) -> int:
        return self._m.edge_length

    @property
    def channels(self) -> int:
        if self._m.faces is None:
            return 0
        return self._m.faces.shape[1]

    @property
    def faces(self) -> Optional[Tensor]:
        """All six faces, shape ``(6, C, N, N)``; ``None`` for a null cube.

        Warnings
        --------
        The tensor is the shared representation, not a copy. Writing through
        it changes every handle sharing this cube and every handle copied
        from it later. Use :meth:`mutable_faces` to write, or ``.clone()``
        the result to keep an independent snapshot.
        """
        return self._m.faces

    def count_mipmaps(self) -> int:
        """Number of levels of a full mip chain down to ``1 x 1``."""
        edge_length = self._m.edge_length
        if edge_length == 0:
            return 0
        return edge_length.bit_length()

    def face(self, index: int) -> Tensor:
        """Read-only view of one face, shape ``(C, N, N)``.

        Warnings
        --------
        The view aliases the shared representation, see :attr:`faces`.
        Writing through it bypasses copy-on-write; use :meth:`mutable_face`.
        """
        _check_face_index(index)
        if self._m.faces is None:
            raise ValueError("cannot access a face of a null cube")
        return self._m.faces[index]

    def mutable_faces(self) -> Tensor:
        """Writable ``(6, C, N, N)`` tensor owned by this handle alone."""
        if self._m.faces is None:
            raise ValueError("cannot mutate a null cube")
        self._detach()
        return self._m.faces

    def mutable_face(self, index: int) -> Tensor:
        """Writable view of one face owned by this handle alone."""
        _check_face_index(index)
        return self.mutable_faces()[index]

    def shares_data_with(self, other: CubeSurface) -> bool:
        """Whether both handles currently refer to the same representation."""
        return self._m is other._m

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    def load(self, path: Union[str, os.PathLike], mipmap: int = 0) -> bool:
        """Replace the cube with one mip level of a DDS cube map.

        Parameters
        ----------
        path : str or os.PathLike
            File with a ``.dds`` extension.
        mipmap : int, optional
            Mip level to load. Negative values count from the smallest
            level, so ``-1`` is the last mip. Default is 0.

        Returns
        -------
        bool
            ``True`` on success. On failure the cube is left untouched.
            Failure covers unknown extensions, unreadable or malformed files,
            containers that are not complete square cube maps, out of range
            mip levels and pixel formats other than 16/32 bit float RGBA and
            32 bit per pixel BGRA.
        """
        if Path(path).suffix.lower() != ".dds":
            return False

        try:
            dds = DirectDrawSurface(path)
        except (OSError, DirectDrawSurfaceError):
            return False

        if not dds.is_texture_cube() or not dds.has_all_cube_faces():
            return False
        if dds.width != dds.height:
            return False

        mipmap_count = dds.mipmap_count
        if mipmap < 0:
            mipmap = mipmap_count + mipmap
        if not 0 <= mipmap < mipmap_count:
            return False

        input_format = dds.input_format()
        if input_format is None:
            return False

        edge_length = dds.surface_width(mipmap)

        try:
            faces = torch.stack(
                [
                    image_from_buffer(
                        dds.read_surface(face, mipmap),
                        input_format,
                        edge_length,
                        edge_length,
                    )
                    for face in range(6)
                ]
            )
        except (DirectDrawSurfaceError, ValueError):
            return False

        self._set_data(_CubeSurfaceData(edge_length, faces))
        return True

    def save(self, path: Union[str, os.PathLike]) -> bool:
        raise NotImplementedError("CubeSurface.save is not implemented")

    # ------------------------------------------------------------------ #
    # Layout conversion
    # ------------------------------------------------------------------ #

    def fold(self, image: Tensor, layout: CubeLayout) -> None:
        raise NotImplementedError("CubeSurface.fold is not implemented")

    def unfold(self, layout: CubeLayout) -> Tensor:
        raise NotImplementedError("CubeSurface.unfold is not implemented")

    # ------------------------------------------------------------------ #
    # Filtering
    # ------------------------------------------------------------------ #

    def irradiance_filter(self, size: int) -> CubeSurface:
        raise NotImplementedError(
            "CubeSurface.irradiance_filter is not implemented"
        )

    def cosine_power_filter(
        self,
        size: int,
        cosine_power: float,
        **kwargs,
    ) -> CubeSurface:
        """Filtered copy of this cube.

        See :func:`torchcube.filter.cosine_power_filter`.
        """
        from torchcube.filter import cosine_power_filter

        return cosine_power_filter(self, size, cosine_power, **kwargs)

    # ------------------------------------------------------------------ #
    # Color space
    # ------------------------------------------------------------------ #

    def to_linear(self, gamma: float) -> None:
        """Convert RGB of every face from gamma-encoded to linear in place."""
        if self.is_null():
            return

        faces = self.mutable_faces()
        faces[:, :3] = gamma_to_linear(faces[:, :3], gamma)

    def to_gamma(self, gamma: float) -> None:
        """Convert RGB of every face from linear to gamma-encoded in place."""
        if self.is_null():
            return

        faces = self.mutable_faces()
        faces[:, :3] = linear_to_gamma(faces[:, :3], gamma)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _set_data(self, data: _CubeSurfaceData) -> None:
        data.add_ref()
        self._m.release()
        self._m = data

    def _detach(self) -> None:
        if self._m.reference_count > 1:
            self._set_data(self._m.clone())
