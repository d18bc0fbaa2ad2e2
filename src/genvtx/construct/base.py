"""Base class for all event collection builders."""

from abc import ABC, abstractmethod

import numpy as np

from .errors import InputValidationError


class BuilderBase(ABC):
    """Abstract base class for building all derived event collections.

    A Builder class takes the records of one event and processes them into
    derived collections which it exposes through read accessors. Each call
    to :meth:`build` fully replaces the state of the builder.
    """

    # Builder name
    name = None

    # Necessary/optional data products to build the collections
    _build_keys = ()

    # Names of the accessors which expose the derived collections
    _products = ()

    def __call__(self, data):
        """Build the derived collections for one event.

        Parameters
        ----------
        data : dict
            Dictionary of data products

        Returns
        -------
        dict
            Dictionary which maps product names onto derived collections
        """
        # Get the description of the fields needed by this builder
        input_data = {}
        for key, req in self._build_keys:
            # If the field has no default value, must be provided
            if req and key not in data:
                raise KeyError(
                    f"Must provide `{key}` data product to build the "
                    f"{self.name} collections."
                )

            if key in data:
                input_data[key] = data[key]

        self.build(**input_data)

        return self.products()

    def products(self):
        """Returns all the derived collections of the last event.

        Returns
        -------
        dict
            Dictionary which maps product names onto derived collections
        """
        return {key: getattr(self, key) for key in self._products}

    @staticmethod
    def check_cut(name, value, allow_zero=False):
        """Checks that a configuration cut is a positive, finite number.

        Parameters
        ----------
        name : str
            Name of the configuration parameter
        value : float
            Value of the configuration parameter
        allow_zero : bool, default False
            If `True`, a null cut is accepted

        Returns
        -------
        float
            Validated value
        """
        try:
            cut = float(value)
        except (TypeError, ValueError) as err:
            raise InputValidationError(
                f"The `{name}` parameter must be a number, got {value!r}."
            ) from err

        if not np.isfinite(cut) or cut < 0.0 or (cut == 0.0 and not allow_zero):
            qualifier = "non-negative" if allow_zero else "positive"
            raise InputValidationError(
                f"The `{name}` parameter must be a {qualifier} finite number, "
                f"got {value}."
            )

        return cut

    @abstractmethod
    def reset(self):
        """Place-holder for a method used to clear the builder state."""
        raise NotImplementedError

    @abstractmethod
    def build(self, **kwargs):
        """Place-holder for a method used to build the collections.

        Parameters
        ----------
        **kwargs : dict
            Data products needed to build the collections
        """
        raise NotImplementedError
