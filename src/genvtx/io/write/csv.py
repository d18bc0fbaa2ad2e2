"""Module to write event summaries and histograms to CSV."""

import os

__all__ = ["CSVWriter"]


class CSVWriter:
    """Writes rows of scalars to a CSV file.

    The header of the file is defined by the keys of the first row. It can
    only be used to store basic quantities (integers, floats, strings, etc.).

    Typical configuration should look like:

    .. code-block:: yaml

        ana:
          event:
            file_name: events.csv
            overwrite: true
    """

    name = "csv"

    def __init__(
        self,
        file_name="output.csv",
        overwrite=False,
        append=False,
        accept_missing=False,
    ):
        """Initialize the basics of the output file.

        Parameters
        ----------
        file_name : str, default 'output.csv'
            Name of the output CSV file
        overwrite : bool, default False
            If True, overwrite the output file if it already exists
        append : bool, default False
            If True, add more rows to an existing CSV file
        accept_missing : bool, default False
            Tolerate missing keys (filled with -1)
        """
        # Check that output file does not already exist, if requested
        if not overwrite and not append and os.path.isfile(file_name):
            raise FileExistsError(f"File with name {file_name} already exists.")

        # Store persistent attributes
        self.file_name = file_name
        self.accept_missing = accept_missing
        self.result_keys = None
        if append:
            if not os.path.isfile(file_name):
                raise FileNotFoundError(
                    f"File not found at path: {file_name}. When using "
                    "`append=True` in CSVWriter, the file must exist at "
                    "the prescribed path before data is written to it."
                )

            with open(self.file_name, "r", encoding="utf-8") as out_file:
                self.result_keys = out_file.readline().strip().split(",")

        else:
            # Make sure the parent directory exists
            dir_name = os.path.dirname(file_name)
            if dir_name:
                os.makedirs(dir_name, exist_ok=True)

    def create(self, row):
        """Initialize the header of the CSV file, record the keys to be stored.

        Parameters
        ----------
        row : dict
            First row to be stored in the file
        """
        self.result_keys = list(row.keys())
        with open(self.file_name, "w", encoding="utf-8") as out_file:
            out_file.write(",".join(self.result_keys) + "\n")

    def append(self, row):
        """Append one row to the CSV file.

        Parameters
        ----------
        row : dict
            Dictionary of scalars to store
        """
        self.extend([row])

    def extend(self, rows):
        """Append multiple rows to the CSV file at once.

        Parameters
        ----------
        rows : List[dict]
            List of dictionaries of scalars to store
        """
        if not rows:
            return

        # If this function has never been called, initialiaze the CSV file
        if self.result_keys is None:
            self.create(rows[0])

        lines = []
        for row in rows:
            row = self.check_keys(row)
            lines.append(",".join([str(row[k]) for k in self.result_keys]))

        with open(self.file_name, "a", encoding="utf-8") as out_file:
            out_file.write("\n".join(lines) + "\n")

    def check_keys(self, row):
        """Checks that the keys of a row match the header of the file.

        Parameters
        ----------
        row : dict
            Dictionary of scalars to store

        Returns
        -------
        dict
            Row with missing keys filled in, if they are tolerated
        """
        if list(row.keys()) == self.result_keys:
            return row

        missing = self.array_diff(self.result_keys, row.keys())
        excess = self.array_diff(row.keys(), self.result_keys)
        if len(excess):
            raise AssertionError(
                "There are keys in this entry which were not present when "
                f"the CSV file was initialized. New keys: {sorted(excess)}"
            )

        if len(missing) and not self.accept_missing:
            raise AssertionError(
                "There are keys missing in this entry which were present when "
                f"the CSV file was initialized. Missing keys: {sorted(missing)}"
            )

        return {k: row.get(k, -1) for k in self.result_keys}

    @staticmethod
    def array_diff(array_x, array_y):
        """Returns the elements of the first array which do not appear in
        the second array.

        Parameters
        ----------
        array_x : List[str]
            First array of strings
        array_y : List[str]
            Second array of strings

        Returns
        -------
        Set[str]
            Set of keys that appear in `array_x` but not in `array_y`.
        """
        return set(array_x).difference(set(array_y))
