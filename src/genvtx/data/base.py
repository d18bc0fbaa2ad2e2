"""Module with a parent class of all data structures."""

from dataclasses import asdict, dataclass

import numpy as np

from genvtx.utils.globals import AXES, INVAL_ID


@dataclass(eq=False)
class DataBase:
    """Base class of all data structures.

    Defines basic methods shared by all data structures.
    """

    # Fixed-length attributes as (key, size) or (key, (size, dtype)) pairs
    _fixed_length_attrs = ()

    # Variable-length attributes as (key, dtype) pairs
    _var_length_attrs = ()

    # Attributes specifying coordinates
    _pos_attrs = ()

    # Attributes specifying vector components
    _vec_attrs = ()

    # Boolean attributes
    _bool_attrs = ()

    # Index attributes
    _index_attrs = ()

    # Attributes that must never be stored to file
    _skip_attrs = ()

    def __post_init__(self):
        """Immediately called after building the class attributes.

        Provides three functions:
        - Gives default values to array-like attributes. If a default value was
          provided in the attribute definition, all instances of this class
          would point to the same memory location.
        - Casts array-like attributes provided as lists/tuples to numpy arrays
          of the expected type.
        - Replaces null index references with the invalid index (-1).
        """
        # Provide default values to the variable-length array attributes
        for attr, dtype in self._var_length_attrs:
            value = getattr(self, attr)
            if value is None:
                setattr(self, attr, np.empty(0, dtype=dtype))
            else:
                setattr(self, attr, np.asarray(value, dtype=dtype))

        # Provide default values to the fixed-length array attributes
        for attr, size in self._fixed_length_attrs:
            if not isinstance(size, tuple):
                dtype = np.float64
            else:
                size, dtype = size

            value = getattr(self, attr)
            if value is None:
                setattr(self, attr, np.full(size, -np.inf, dtype=dtype))
            else:
                value = np.asarray(value, dtype=dtype)
                assert value.shape == (size,), (
                    f"The `{attr}` attribute of `{self.__class__.__name__}` "
                    f"must have shape ({size},), got {value.shape}."
                )
                setattr(self, attr, value)

        # Null index references point to nothing
        for attr in self._index_attrs:
            value = getattr(self, attr)
            setattr(self, attr, INVAL_ID if value is None else int(value))

        # Cast numpy booleans back to regular booleans
        for attr in self._bool_attrs:
            if isinstance(getattr(self, attr), np.bool_):
                setattr(self, attr, bool(getattr(self, attr)))

    def __eq__(self, other):
        """Checks that all attributes of two class instances are the same.

        This overloads the default dataclass `__eq__` method to include an
        appopriate check for vector (numpy) attributes.

        Parameters
        ----------
        other : obj
            Other instance of the same object class

        Returns
        -------
        bool
            `True` if all attributes of both objects are identical
        """
        # Check that the two objects belong to the same class
        if self.__class__ != other.__class__:
            return False

        # Check that all base attributes are identical
        for k, v in self.__dict__.items():
            v_other = getattr(other, k)
            if v is None or np.isscalar(v):
                # For scalars, regular comparison will do
                if v_other != v:
                    return False

            else:
                # For vectors, compare all elements
                if v.shape != v_other.shape or (v_other != v).any():
                    return False

        return True

    def as_dict(self):
        """Returns the data class as dictionary of (key, value) pairs.

        Returns
        -------
        dict
            Dictionary of attribute names and their values
        """
        return {k: v for k, v in asdict(self).items() if k not in self._skip_attrs}

    def scalar_dict(self, attrs=None):
        """Returns the data class attributes as a dictionary of scalars.

        This is useful when storing data classes in CSV files, which expect
        a single scalar per column in the table. Variable-length attributes
        are summarized by their length.

        Parameters
        ----------
        attrs : List[str], optional
            List of attribute names to include in the dictionary. If not
            specified, all the keys are included.

        Returns
        -------
        dict
            Dictionary of scalar values
        """
        # Loop over the attributes of the data class
        scalar_dict, found = {}, []
        for attr, value in self.as_dict().items():
            # If the attribute is not requested, skip
            if attrs is not None and attr not in attrs:
                continue
            found.append(attr)

            # Dispatch
            if np.isscalar(value):
                scalar_dict[attr] = value

            elif attr in self._pos_attrs + self._vec_attrs and len(value) == 3:
                # If the attribute is a 3-vector, expand with axis
                for i, v in enumerate(value):
                    scalar_dict[f"{attr}_{AXES[i]}"] = v

            elif attr in self.fixed_length_attrs:
                # If the attribute is a fixed-length array, expand with index
                for i, v in enumerate(value):
                    scalar_dict[f"{attr}_{i}"] = v

            elif attr in self.var_length_attrs:
                # Variable-length arrays are stored as their length
                scalar_dict[f"num_{attr}"] = len(value)

            else:
                raise ValueError(
                    f"Cannot expand the `{attr}` attribute of "
                    f"`{self.__class__.__name__}` to scalar values."
                )

        if attrs is not None and len(attrs) != len(found):
            class_name = self.__class__.__name__
            miss = list(set(attrs).difference(set(found)))
            raise AttributeError(
                f"Attribute(s) {miss} do(es) not appear in {class_name}."
            )

        return scalar_dict

    @property
    def fixed_length_attrs(self):
        """Fetches the dictionary of fixed-length array attributes.

        Returns
        -------
        Dict[str, int]
            Dictionary which maps fixed-length attributes onto their length
        """
        return dict(self._fixed_length_attrs)

    @property
    def var_length_attrs(self):
        """Fetches the dictionary of variable-length array attributes.

        Returns
        -------
        Dict[str, type]
            Dictionary which maps variable-length attributes onto their type
        """
        return dict(self._var_length_attrs)

    @property
    def index_attrs(self):
        """Fetches the list of attributes that correspond to indexes.

        Returns
        -------
        List[str]
            List of attributes that specificy indexes
        """
        return self._index_attrs


@dataclass(eq=False)
class PosDataBase(DataBase):
    """Base class of for data structures with positional attributes.

    Attributes
    ----------
    units : str
        Units in which the position attributes are expressed
    """

    units = "cm"

    def __post_init__(self):
        """Immediately called after building the class attributes.

        Makes sure the units are not binary and that they are recognized.
        """
        # Call the main post initialization function
        super().__post_init__()

        # Parse the units
        if isinstance(self.units, bytes):
            self.units = self.units.decode()

        assert self.units in ["cm", "mm"], "Units can only be `cm` or `mm`."

    def nonfinite_attrs(self, attrs=None):
        """Lists the positional attributes which contain NaN or inf values.

        Parameters
        ----------
        attrs : List[str], optional
            Subset of positional attributes to check. If not specified,
            all the positional attributes are checked.

        Returns
        -------
        List[str]
            Names of the positional attributes which are not finite
        """
        attrs = self._pos_attrs if attrs is None else attrs
        return [attr for attr in attrs if not np.all(np.isfinite(getattr(self, attr)))]
