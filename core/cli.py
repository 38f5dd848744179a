#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
core/cli.py
Recálculo de un proyecto FV desde la línea de comandos.

Uso:
  python -m core.cli proyecto.yaml
  python -m core.cli proyecto.yaml --json resultado.json
  python -m core.cli proyecto.yaml --data ./data --config ./config/engine.yaml --verbose
  python -m core.cli proyecto.yaml --rebalance

Código de salida: 0 exportable, 2 export bloqué, 1 error de carga.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from core.climate import StaticClimateProvider
from core.configuration import load_engine_config
from core.pipeline import RecomputeResult, recompute
from core.project_yaml import load_project_yaml
from electrical.catalogs import load_catalogs

logger = logging.getLogger(__name__)


# ==========================================================
# Salida texto
# ==========================================================

def _fmt_sizing(result: RecomputeResult) -> List[str]:
    lines: List[str] = []
    ac = result.sizing.ac
    if ac is not None:
        for seg in (ac.ac1, ac.ac2):
            if seg is None:
                continue
            forced = " (forcée)" if seg.is_forced else ""
            lines.append(
                f"  {seg.role}: {seg.effective_section_mm2:g} mm²{forced} | L={seg.length_m:g} m | "
                f"I={seg.current_a:.1f} A | In={seg.breaker_a} A ({seg.breaker_basis}) | "
                f"ΔU={seg.drop_pct:.2f}% | protection {seg.protection_status}"
            )
    for run in result.sizing.dc_runs:
        lines.append(
            f"  DC MPPT {run.mppt_index}: {run.effective_section_mm2:g} mm² | L={run.length_m:g} m | "
            f"I={run.current_a:.1f} A | ΔU={run.du_pct:.2f}% | {run.status}"
        )
    mb = result.micro_branches
    if mb is not None:
        for b in mb.branches:
            lines.append(
                f"  {b.name} [{b.phase}]: {b.micro_count} micros | {b.section_mm2:g} mm² | "
                f"L={b.length_m:g} m | I={b.current_a:.1f} A | ΔU={b.drop_pct:.2f}%"
            )
    return lines


def render_text(result: RecomputeResult) -> str:
    out: List[str] = []
    project = result.project
    out.append(f"Projet: {project.name or project.id}")
    out.append(f"Climat: Tmin={result.climate.temp_min:g} °C | Tmax amb={result.climate.temp_max_amb:g} °C")
    out.append(f"Onduleur: {result.inverter.id if result.inverter else '-'}")
    out.append(f"Compatibilité: {'OK' if result.report.is_compatible else 'NON CONFORME'}")

    out.append("")
    out.append("Dimensionnement:")
    out.extend(_fmt_sizing(result) or ["  -"])

    if result.blocking_reasons:
        out.append("")
        out.append("Export bloqué:")
        out.extend(f"  - {r}" for r in result.blocking_reasons)
    if result.advisories:
        out.append("")
        out.append("Avertissements:")
        out.extend(f"  - {a}" for a in result.advisories)

    out.append("")
    out.append("Liste matériel:")
    for g in result.groups:
        out.append(f"[{g.category}]")
        for m in g.items:
            out.append(f"  {m.quantity:>4} x {m.id:<22} {m.description}  {m.price}")
        for sub in g.sub_sections:
            out.append(f"  -- {sub.title} --")
            for m in sub.items:
                out.append(f"  {m.quantity:>4} x {m.id:<22} {m.description}  {m.price}")
    return "\n".join(out)


# ==========================================================
# Main
# ==========================================================

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Recalcule conformité, sections et liste matériel d'un projet PV")
    ap.add_argument("project", help="Fichier projet YAML")
    ap.add_argument("--data", default="", help="Répertoire des catalogues YAML (par défaut data/)")
    ap.add_argument("--config", default="", help="Fichier engine.yaml (par défaut config/engine.yaml)")
    ap.add_argument("--climate", default="", help="Table climat YAML (par défaut config/climate.yaml)")
    ap.add_argument("--json", default="", help="Salida JSON (opcional)")
    ap.add_argument("--rebalance", action="store_true", help="Rééquilibre les strings avant l'analyse")
    ap.add_argument("--verbose", "-v", action="store_true", help="Logs DEBUG")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_engine_config(Path(args.config) if args.config else None)
        catalogs = load_catalogs(Path(args.data) if args.data else None)
        climate = StaticClimateProvider.from_yaml(
            Path(args.climate) if args.climate else None,
            default_temp_min_c=cfg.default_temp_min_c,
            default_temp_max_amb_c=cfg.default_temp_max_amb_c,
        )
        project = load_project_yaml(Path(args.project))
    except (FileNotFoundError, ValueError, KeyError) as e:
        logger.debug("Carga fallida", exc_info=True)
        print(f"Erreur: {e}", file=sys.stderr)
        return 1

    result = recompute(
        project,
        catalogs,
        climate_provider=climate,
        config=cfg,
        auto_rebalance=args.rebalance,
    )

    print(render_text(result))

    if args.json:
        payload = asdict(result)
        Path(args.json).write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=str),
            encoding="utf-8",
        )

    return 0 if result.can_export else 2


if __name__ == "__main__":
    raise SystemExit(main())
