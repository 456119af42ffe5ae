"""Lexically scoped namespace for the Imp language: a stack of frames mapping names to values, innermost last, with a
parallel stack of the names each frame declared mutable.
"""

from impinterp.lang.error import AlreadyDefined, CannotExitRoot, NotDefined, NotMutable


class Namespace:
    """Governs variable bindings across nested blocks. The root frame always exists and can never be exited.

    By default a name is mutable if it was declared with `let mut` in *any* frame currently on the stack, even if the
    binding found by lookup is an immutable shadow. With strict_mutability, only the frame that owns the binding found
    by lookup decides.
    """

    def __init__(self, strict_mutability=False):
        self.strict_mutability = strict_mutability

        self.frames = [{}]      # list of dicts of name: Value, innermost last
        self.mutables = [set()]  # names declared with `let mut`, one set per frame

    @classmethod
    def root(cls, strict_mutability=False):
        """Returns a namespace holding only the root frame."""
        return cls(strict_mutability)

    @property
    def depth(self):
        return len(self.frames)

    def enter_block(self):
        self.frames.append({})
        self.mutables.append(set())

    def exit_block(self):
        if len(self.frames) == 1:
            raise CannotExitRoot()

        self.frames.pop()
        self.mutables.pop()

    def unwind(self, depth):
        """Exits blocks until at most depth frames are left. The root frame is always kept."""
        while len(self.frames) > max(depth, 1):
            self.exit_block()

    def _owner(self, name):
        """Index of the innermost frame binding name, or None."""
        for idx in range(len(self.frames) - 1, -1, -1):
            if name in self.frames[idx]:
                return idx
        return None

    def get(self, name):
        """Returns value bound to name in the nearest enclosing frame, or None if unbound."""
        idx = self._owner(name)
        return None if idx is None else self.frames[idx][name]

    def add(self, name, value):
        """Declares an immutable binding in the innermost frame."""
        if name in self.frames[-1]:
            raise AlreadyDefined(name)
        self.frames[-1][name] = value

    def add_mutable(self, name, value):
        """Declares a mutable binding in the innermost frame."""
        self.add(name, value)
        self.mutables[-1].add(name)

    def is_mutable(self, name):
        if self.strict_mutability:
            idx = self._owner(name)
            return idx is not None and name in self.mutables[idx]
        return any(name in names for names in self.mutables)

    def mutate(self, name, value):
        """Overwrites the binding of name in the nearest enclosing frame that holds it."""
        if not self.is_mutable(name):
            raise NotMutable(name)

        idx = self._owner(name)
        if idx is None:
            raise NotDefined(name)
        self.frames[idx][name] = value

    def bindings(self):
        """Returns dict of visible name: (value, mutable), inner bindings shadowing outer ones."""
        visible = {}
        for frame in self.frames:
            visible.update(frame)
        return {name: (value, self.is_mutable(name)) for name, value in sorted(visible.items())}

    def __repr__(self):
        return f"{type(self).__name__}(frames={self.frames!r}, mutables={self.mutables!r})"
