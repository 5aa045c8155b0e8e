#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PVsyst ``.PAN`` module file parser.

A PAN file is a flat list of ``Key=Value`` lines grouped into nested
``PVObject_`` blocks, with an optional multi-line remarks section::

    PVObject_=pvModule
      Version=6.81
      Flags=$00900243
      PVObject_Commercial=pvCommercial
        Manufacturer=Acme Solar
        Model=AS-400M
        Width=1.038
        Height=1.755
      End of PVObject pvCommercial
      Technol=mtSiMono
      NCelS=66
      PNom=400.0
      Remarks, Count=2
        Str_1=Half-cut cells
        Str_2=Bifacial
      End of Remarks
    End of PVObject pvModule

Block markers are ignored; keys are normalised through :data:`KEY_ALIASES` so
that differently-cased vendor files produce the same dictionary.
"""

import math
import re
from typing import Dict, Optional, Union
from uuid import uuid4

from pydantic import ValidationError

from ...models.module import Module
from .file_parser import FileParser, FileParserError

PanValue = Union[str, float]
PanData = Dict[str, PanValue]

KEY_ALIASES: Dict[str, str] = {
    "model": "Model",
    "manufacturer": "Manufacturer",
    "technol": "Technol",
    "ncels": "NCelS",
    "ncelp": "NCelP",
    "ndiode": "NDiode",
    "pnom": "PNom",
    "pnomtollow": "PNomTolLow",
    "pnomtolup": "PNomTolUp",
    "isc": "Isc",
    "voc": "Voc",
    "imp": "Imp",
    "vmp": "Vmp",
    "muisc": "mu_Isc",        # mA/°C in the file
    "muvocspec": "muVocSpec",  # mV/°C in the file
    "mupmpreq": "muPmpReq",
    "gamma": "gamma_ref",
    "mugamma": "mu_gamma",
    "rserie": "R_s",
    "rshunt": "R_sh_ref",
    "rp_0": "R_sh_0",
    "rp_exp": "R_sh_exp",
    "width": "Width",
    "height": "Height",
    "datasource": "DataSource",
    "i_l_ref": "I_L_ref",
    "i_o_ref": "I_o_ref",
    "r_sh_ref": "R_sh_ref",
    "r_s": "R_s",
}

# Normalised PAN key -> Module field
_MODULE_FIELDS: Dict[str, str] = {
    "PNom": "max_power_pmp",
    "Width": "width",
    "Height": "height",
    "Voc": "voc",
    "Isc": "isc",
    "Vmp": "vmp",
    "Imp": "imp",
    "NCelS": "n_cells_in_series",
    "NCelP": "n_cells_in_parallel",
    "NDiode": "n_diodes",
    "PNomTolLow": "p_nom_tol_low",
    "PNomTolUp": "p_nom_tol_up",
    "mu_Isc": "mu_isc",
    "muVocSpec": "mu_voc_spec",
    "muPmpReq": "mu_pmp_req",
    "gamma_ref": "gamma_ref",
    "mu_gamma": "mu_gamma",
    "R_s": "r_s",
    "R_sh_ref": "r_sh_ref",
    "R_sh_0": "r_sh_0",
    "R_sh_exp": "r_sh_exp",
    "I_L_ref": "i_l_ref",
    "I_o_ref": "i_o_ref",
    "Technol": "technology",
    "DataSource": "data_source",
}

_REMARK_RE = re.compile(r"^Str_\d+=(.*)")


def _coerce(value: str) -> PanValue:
    """Return *value* as a float when the whole string is a number."""
    try:
        number = float(value)
    except ValueError:
        return value
    return number if math.isfinite(number) else value


def parse_pan_text(content: str) -> PanData:
    """Parse PAN file text into a flat ``{normalised_key: value}`` dict."""
    data: PanData = {}
    remarks: list[str] = []
    in_remarks = False

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("//") or line.startswith("PVObject_") or line.startswith("End of PVObject"):
            continue

        if line.startswith("Remarks, Count="):
            in_remarks = True
            continue
        if line.startswith("End of Remarks"):
            in_remarks = False
            data["Remarks"] = "\n".join(remarks)
            continue
        if in_remarks:
            match = _REMARK_RE.match(line)
            if match and match.group(1):
                remarks.append(match.group(1))
            continue

        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        data[KEY_ALIASES.get(key.lower(), key)] = _coerce(value.strip())

    return data


def module_from_pan(data: PanData, module_id: Optional[str] = None) -> Module:
    """Build a :class:`Module` from parsed PAN data.

    Raises:
        FileParserError: If the data has no model name or fails validation.
    """
    model_name = data.get("Model")
    if model_name in (None, ""):
        raise FileParserError("PAN data has no 'Model' entry")

    fields: Dict[str, object] = {
        "id": module_id or str(uuid4()),
        "model_name": str(model_name),
        "manufacturer": str(data["Manufacturer"]) if "Manufacturer" in data else None,
        "raw_pan_data": dict(data),
    }
    for pan_key, field in _MODULE_FIELDS.items():
        if pan_key in data:
            value = data[pan_key]
            if field in ("technology", "data_source"):
                value = str(value)
            elif field.startswith("n_") and isinstance(value, float):
                value = int(value)
            fields[field] = value
    try:
        return Module.model_validate(fields)
    except ValidationError as exc:
        raise FileParserError(f"PAN data does not describe a valid module: {exc}") from exc


class PanParser(FileParser):
    """Parser for PVsyst ``.PAN`` module definition files."""

    @classmethod
    def get_supported_extensions(cls):
        return [".pan"]

    def parse(self, file_path: str, options: Optional[Dict] = None) -> Module:
        """Parse *file_path* and return the module it describes.

        Args:
            file_path: Path to the ``.PAN`` file.
            options: Optional ``{"module_id": str}`` to fix the new module's id.

        Raises:
            FileParserError: If the file is unreadable or not a usable PAN file.
        """
        self.logger.info(f"Parsing PAN file: '{file_path}'")
        self._file_path = file_path
        options = options or {}

        self._data = parse_pan_text(self.read_text(file_path))
        if not self.validate():
            self.log_error(f"No module definition found in {file_path}")
            raise FileParserError(self._last_error)

        module = module_from_pan(self._data, options.get("module_id"))
        self.logger.info(f"Parsed module '{module.label}' ({module.max_power_pmp} W)")
        return module

    def validate(self) -> bool:
        return bool(self._data) and "Model" in self._data
