"""SDF elements and objects.

An :class:`SDFElement` is one primitive placed by a :class:`Transform`,
together with the :class:`Operator` that merges it into everything evaluated
before it.  An :class:`SDFObject` is an ordered sequence of elements whose
field is the left fold of those merges, seeded with ``+inf``.

Element order matters: ``SUBTRACTION`` removes the element from the
accumulated shape, so moving a subtracting element changes the result.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from . import grid, mesh
from . import sdf_lib as sdf
from .operators import Bounds, Operator, combine_bounds, combine_value
from .primitives import Primitive, Sphere
from .transform import Transform

_Array = npt.NDArray[np.floating]


# ===========================================================================
# Element
# ===========================================================================

class SDFElement:
    """One primitive with a transform and a merge operator.

    Defaults to a unit :class:`Sphere`, the identity transform and
    :attr:`Operator.UNION`.  All ``with_*`` builders return a new element.
    """

    __slots__ = ("primitive", "transform", "operator")

    def __init__(
        self,
        primitive: Optional[Primitive] = None,
        transform: Optional[Transform] = None,
        operator: Operator = Operator.UNION,
    ) -> None:
        self.primitive = primitive if primitive is not None else Sphere(1.0)
        self.transform = transform if transform is not None else Transform()
        self.operator = Operator(operator)

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def _replace(self, **changes) -> "SDFElement":
        fields = {
            "primitive": self.primitive,
            "transform": self.transform,
            "operator": self.operator,
        }
        fields.update(changes)
        return SDFElement(**fields)

    def with_primitive(self, primitive: Primitive) -> "SDFElement":
        return self._replace(primitive=primitive)

    def with_operator(self, operator: Operator) -> "SDFElement":
        return self._replace(operator=operator)

    def with_translation(self, translation: Sequence[float]) -> "SDFElement":
        return self._replace(transform=self.transform.with_translation(translation))

    def with_rotation(self, rotation: Sequence[float]) -> "SDFElement":
        """Set the rotation quaternion ``(x, y, z, w)``."""
        return self._replace(transform=self.transform.with_rotation(rotation))

    def with_scale(self, scale: float) -> "SDFElement":
        """Set the uniform scale; the sign is discarded."""
        return self._replace(transform=self.transform.with_scale(scale))

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    @property
    def scale(self) -> float:
        return self.transform.scale

    def value_at_point(self, p) -> _Array:
        """Signed distance of this element alone at *p*."""
        local = self.transform.apply_inverse(sdf.as_points(p))
        return self.primitive.value_at_point(local) * self.transform.scale

    def process_at_point(self, p, accumulated) -> _Array:
        """Merge this element's value at *p* into *accumulated*."""
        return combine_value(self.operator, accumulated, self.value_at_point(p))

    def get_bounds(self, previous: Optional[Bounds] = None) -> Bounds:
        """World-space bounds, merged into *previous* when given."""
        corners = self.transform.apply(self.primitive.bounds().corners())
        bounds = Bounds(corners.min(axis=0), corners.max(axis=0))
        if previous is not None:
            bounds = combine_bounds(self.operator, previous, bounds)
        return bounds

    def __repr__(self) -> str:
        return (
            f"SDFElement(primitive={self.primitive!r}, transform={self.transform!r}, "
            f"operator={self.operator.name})"
        )


# ===========================================================================
# Object
# ===========================================================================

class SDFObject:
    """An ordered sequence of :class:`SDFElement` instances.

    Implements:
    - Evaluation:  :meth:`value_at_point`, :meth:`get_bounds`
    - Builders:    :meth:`with_element`, :meth:`union`, :meth:`subtract`,
                   :meth:`intersect`
    - Generation:  :meth:`generate_boxes`, :meth:`generate_texture`,
                   :meth:`generate_lod_boxes`, :meth:`generate_box_mesh`
    """

    __slots__ = ("elements",)

    def __init__(self, elements: Iterable[SDFElement] = ()) -> None:
        self.elements: Tuple[SDFElement, ...] = tuple(elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self):
        return iter(self.elements)

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def with_element(self, element: SDFElement) -> "SDFObject":
        return SDFObject(self.elements + (element,))

    def union(self, element: SDFElement) -> "SDFObject":
        """Append *element*, merged with :attr:`Operator.UNION`."""
        return self.with_element(element.with_operator(Operator.UNION))

    def subtract(self, element: SDFElement) -> "SDFObject":
        """Append *element*, carved out of everything before it."""
        return self.with_element(element.with_operator(Operator.SUBTRACTION))

    def intersect(self, element: SDFElement) -> "SDFObject":
        """Append *element*, merged with :attr:`Operator.INTERSECTION`."""
        return self.with_element(element.with_operator(Operator.INTERSECTION))

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def value_at_point(self, p) -> _Array:
        """Signed distance of the whole object at *p*.

        Reads ``+inf`` everywhere when the object has no elements.
        """
        p = sdf.as_points(p)
        value = np.full(p.shape[:-1], np.inf)
        for element in self.elements:
            value = element.process_at_point(p, value)
        return value

    def __call__(self, p) -> _Array:
        return self.value_at_point(p)

    def get_bounds(self) -> Bounds:
        """Bounds of the whole object; the zero box when it is empty."""
        bounds: Optional[Bounds] = None
        for element in self.elements:
            bounds = element.get_bounds(bounds)
        return bounds if bounds is not None else Bounds.empty()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate_boxes(self, resolution: int, bounds: Optional[Bounds] = None) -> Tuple[float, _Array]:
        """See :func:`leansdf.grid.generate_boxes`; *bounds* defaults to :meth:`get_bounds`."""
        return grid.generate_boxes(self, resolution, bounds if bounds is not None else self.get_bounds())

    def generate_texture(self, resolution: int, bounds: Bounds) -> bytes:
        """See :func:`leansdf.grid.generate_texture`."""
        return grid.generate_texture(self, resolution, bounds)

    def generate_lod_boxes(self, resolution: int, max_lods: int, min_box_size: float) -> List[grid.LODLevel]:
        """See :func:`leansdf.grid.generate_lod_boxes`."""
        return grid.generate_lod_boxes(self, resolution, max_lods, min_box_size)

    def generate_box_mesh(self, resolution: int, target_lod: int, min_box_size: float) -> mesh.BoxMesh:
        """See :func:`leansdf.mesh.generate_box_mesh`."""
        return mesh.generate_box_mesh(self, resolution, target_lod, min_box_size)

    def __repr__(self) -> str:
        return f"SDFObject({list(self.elements)!r})"
