from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Module(BaseModel):
    """A PV module product from the catalog.

    Only ``width``, ``height`` (metres) and ``max_power_pmp`` (W) matter to the
    layout engine.  The electrical characterisation fields come from PAN files
    and are carried for the electrical tools.
    """

    id: str
    model_name: str
    manufacturer: Optional[str] = None
    technology: Optional[str] = None
    created_at: Optional[str] = None

    max_power_pmp: Optional[float] = None
    width: Optional[float] = None   # metres
    height: Optional[float] = None  # metres

    voc: Optional[float] = None
    isc: Optional[float] = None
    vmp: Optional[float] = None
    imp: Optional[float] = None
    n_cells_in_series: Optional[int] = None
    n_cells_in_parallel: Optional[int] = None
    n_diodes: Optional[int] = None
    p_nom_tol_low: Optional[float] = None
    p_nom_tol_up: Optional[float] = None
    mu_isc: Optional[float] = None
    mu_voc_spec: Optional[float] = None
    mu_pmp_req: Optional[float] = None
    gamma_ref: Optional[float] = None
    mu_gamma: Optional[float] = None
    r_s: Optional[float] = None
    r_sh_ref: Optional[float] = None
    r_sh_0: Optional[float] = None
    r_sh_exp: Optional[float] = None
    i_l_ref: Optional[float] = None
    i_o_ref: Optional[float] = None
    data_source: Optional[str] = None

    raw_pan_data: dict[str, str | float] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def label(self) -> str:
        return f"{self.manufacturer or ''} {self.model_name}".strip()

    @property
    def can_be_laid_out(self) -> bool:
        """True when the module has positive dimensions and a power rating."""
        return bool(
            self.width and self.width > 0
            and self.height and self.height > 0
            and self.max_power_pmp
        )

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_dict(cls, d: dict) -> Module:
        return cls.model_validate(d)
