import argparse
import logging
from typing import List, Optional

import numpy as np
import pandas as pd

from .analytics import fit_diffusivity
from .data import load_uptake_csv
from .errors import IntegrationError, ParameterError
from .films import effectiveness_factor, sip_film_flux, sip_film_profile, thiele_modulus
from .mecs import MECSParticle
from .monolith import MonolithChannel
from .pde import ReactionDiffusionModel, simulate_reaction_diffusion
from .properties import interfacial_concentration
from .settings import settings
from .uptake import fractional_uptake, half_time

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SIPSim - CO2 mass transfer into solvent impregnated polymers")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default from SIPSIM_LOG_LEVEL)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    # Steady film
    p_film = sub.add_parser("film", help="Steady reacting SIP film (impermeable backing)")
    p_film.add_argument("--c_star", type=float, default=None, help="Surface solubility (mol/m3)")
    p_film.add_argument("--p", type=float, default=None, help="CO2 partial pressure (Pa), used when --c_star is absent")
    p_film.add_argument("--T", type=float, default=298.15, help="Temperature (K) for the water solubility")
    p_film.add_argument("--D", type=float, required=True, help="CO2 diffusivity in the film (m2/s)")
    p_film.add_argument("--k1", type=float, required=True, help="Pseudo-first-order rate constant (1/s)")
    p_film.add_argument("--thickness", type=float, required=True, help="Film thickness (m)")
    p_film.add_argument("--points", type=int, default=51)
    p_film.add_argument("--csv", type=str, default=None, help="Write the concentration profile here")

    # Transient uptake
    p_up = sub.add_parser("uptake", help="Fractional uptake curve without reaction")
    p_up.add_argument("--D", type=float, required=True)
    p_up.add_argument("--size", type=float, required=True, help="Slab thickness or radius (m)")
    p_up.add_argument("--geometry", choices=["slab", "cylinder", "sphere"], default="slab")
    p_up.add_argument("--tend", type=float, default=None, help="End time (s), default 10 half times")
    p_up.add_argument("--points", type=int, default=101)
    p_up.add_argument("--csv", type=str, default="uptake.csv")

    # MECS particle
    p_mecs = sub.add_parser("mecs", help="Steady absorption into one MECS particle")
    p_mecs.add_argument("--core_radius", type=float, required=True)
    p_mecs.add_argument("--shell", type=float, required=True, help="Shell thickness (m)")
    p_mecs.add_argument("--D_shell", type=float, required=True)
    p_mecs.add_argument("--K_shell", type=float, required=True)
    p_mecs.add_argument("--D_core", type=float, required=True)
    p_mecs.add_argument("--m_core", type=float, required=True)
    p_mecs.add_argument("--k1", type=float, required=True)
    p_mecs.add_argument("--capacity", type=float, required=True)
    p_mecs.add_argument("--nu", type=float, default=1.0)
    p_mecs.add_argument("--c_gas", type=float, required=True, help="Gas CO2 concentration (mol/m3)")
    p_mecs.add_argument("--k_gas", type=float, required=True, help="Gas film coefficient (m/s)")

    # Monolith (steady) and breakthrough share the channel description
    for name, helptext in (("monolith", "Steady coated monolith channel"), ("breakthrough", "Monolith breakthrough curve")):
        p = sub.add_parser(name, help=helptext)
        p.add_argument("--d", type=float, required=True, help="Hydraulic diameter (m)")
        p.add_argument("--length", type=float, required=True)
        p.add_argument("--u", type=float, required=True, help="Gas velocity (m/s)")
        p.add_argument("--D_gas", type=float, required=True)
        p.add_argument("--coating", type=float, required=True, help="Coating thickness (m)")
        p.add_argument("--D_coating", type=float, required=True)
        p.add_argument("--m_coating", type=float, required=True)
        p.add_argument("--k1", type=float, required=True)
        p.add_argument("--capacity", type=float, default=0.0, help="Sorbent in coating (mol/m3)")
        p.add_argument("--shape", choices=["square", "circular", "triangle"], default="square")
        p.add_argument("--nu", type=float, default=1.0)
        if name == "monolith":
            p.add_argument("--points", type=int, default=101)
            p.add_argument("--csv", type=str, default="monolith.csv")
        else:
            p.add_argument("--c_in", type=float, required=True, help="Inlet CO2 (mol/m3)")
            p.add_argument("--tend", type=float, required=True)
            p.add_argument("--cells", type=int, default=100)
            p.add_argument("--points", type=int, default=201)
            p.add_argument("--csv", type=str, default="breakthrough.csv")

    # Method of lines
    p_pde = sub.add_parser("pde", help="Reaction-diffusion by the method of lines")
    p_pde.add_argument("--size", type=float, required=True)
    p_pde.add_argument("--D_A", type=float, required=True)
    p_pde.add_argument("--D_B", type=float, default=0.0)
    p_pde.add_argument("--k2", type=float, required=True)
    p_pde.add_argument("--c_B0", type=float, required=True)
    p_pde.add_argument("--c_star", type=float, required=True)
    p_pde.add_argument("--nu", type=float, default=1.0)
    p_pde.add_argument("--geometry", choices=["slab", "cylinder", "sphere"], default="slab")
    p_pde.add_argument("--k_ext", type=float, default=None)
    p_pde.add_argument("--tend", type=float, required=True)
    p_pde.add_argument("--cells", type=int, default=None)
    p_pde.add_argument("--points", type=int, default=101)
    p_pde.add_argument("--csv", type=str, default="pde.csv")
    p_pde.add_argument("--profiles", type=str, default=None, help="Also write concentration profiles here")

    # Diffusivity fit
    p_fit = sub.add_parser("fit", help="Fit an effective diffusivity to an uptake CSV")
    p_fit.add_argument("--csv", type=str, required=True)
    p_fit.add_argument("--size", type=float, required=True)
    p_fit.add_argument("--geometry", choices=["slab", "cylinder", "sphere"], default="slab")
    return parser


def _channel(args: argparse.Namespace) -> MonolithChannel:
    return MonolithChannel(
        hydraulic_diameter=args.d,
        length=args.length,
        velocity=args.u,
        D_gas=args.D_gas,
        coating_thickness=args.coating,
        D_coating=args.D_coating,
        m_coating=args.m_coating,
        k1=args.k1,
        capacity=args.capacity,
        shape=args.shape,
        nu=args.nu,
    )


def _dispatch(args: argparse.Namespace) -> None:
    if args.cmd == "film":
        if args.c_star is None and args.p is None:
            raise SystemExit("film needs --c_star or --p")
        c_star = args.c_star if args.c_star is not None else interfacial_concentration(args.p, args.T)
        phi = thiele_modulus(args.thickness, args.k1, args.D)
        flux = sip_film_flux(c_star, args.D, args.k1, args.thickness)
        eta = effectiveness_factor(phi, "slab")
        print(f"phi={phi:.4g} effectiveness={eta:.4g} flux={flux:.4g} mol/m2/s")
        if args.csv:
            x = np.linspace(0.0, args.thickness, args.points)
            c = sip_film_profile(x, c_star, args.D, args.k1, args.thickness)
            pd.DataFrame({"x": x, "c": c}).to_csv(args.csv, index=False)
        return

    if args.cmd == "uptake":
        tend = args.tend if args.tend is not None else 10.0 * half_time(args.D, args.size, args.geometry)
        t = np.linspace(0.0, tend, args.points)
        frac = fractional_uptake(t, args.D, args.size, args.geometry)
        pd.DataFrame({"time_s": t, "fraction": frac}).to_csv(args.csv, index=False)
        return

    if args.cmd == "mecs":
        particle = MECSParticle(
            core_radius=args.core_radius,
            shell_thickness=args.shell,
            D_shell=args.D_shell,
            K_shell=args.K_shell,
            D_core=args.D_core,
            m_core=args.m_core,
            k1=args.k1,
            capacity=args.capacity,
            nu=args.nu,
        )
        res = particle.resistances(args.k_gas)
        rate = particle.absorption_rate(args.c_gas, args.k_gas)
        print(
            f"R_gas={res['gas']:.4g} R_shell={res['shell']:.4g} R_core={res['core']:.4g} s/m3; "
            f"rate={rate:.4g} mol/s; controlling={particle.controlling_resistance(args.k_gas)}; "
            f"t_sat={particle.saturation_time(args.c_gas, args.k_gas):.4g} s"
        )
        return

    if args.cmd == "monolith":
        channel = _channel(args)
        channel.axial_profile(args.points).to_csv(args.csv, index=False)
        print(
            f"K={channel.overall_coefficient():.4g} m/s NTU={channel.ntu():.4g} "
            f"efficiency={channel.capture_efficiency():.4f} MTZ={channel.mass_transfer_zone_length():.4g} m"
        )
        return

    if args.cmd == "breakthrough":
        channel = _channel(args)
        result = channel.simulate_breakthrough(args.c_in, args.tend, n_cells=args.cells, n_times=args.points)
        result.to_frame().to_csv(args.csv, index=False)
        t5 = result.breakthrough_time(0.05)
        print(f"t_5%={t5 if t5 is not None else 'not reached'} front_velocity={result.front_velocity:.4g} m/s")
        return

    if args.cmd == "pde":
        model = ReactionDiffusionModel(
            size=args.size,
            D_A=args.D_A,
            D_B=args.D_B,
            k2=args.k2,
            c_B0=args.c_B0,
            c_star=args.c_star,
            nu=args.nu,
            geometry=args.geometry,
            k_ext=args.k_ext,
        )
        result = simulate_reaction_diffusion(model, args.tend, n_cells=args.cells, n_times=args.points)
        result.summary_frame().to_csv(args.csv, index=False)
        if args.profiles:
            result.to_frame().to_csv(args.profiles, index=False)
        return

    if args.cmd == "fit":
        points = load_uptake_csv(args.csv)
        fit = fit_diffusivity([p.time_s for p in points], [p.fraction for p in points], args.size, args.geometry)
        print(f"D={fit.D:.4e} m2/s stderr={fit.D_stderr:.2e} rmse={fit.rmse:.4f}")
        return


def run_cli(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("running %s", args.cmd)
    try:
        _dispatch(args)
    except (ParameterError, IntegrationError) as exc:
        raise SystemExit(f"sipsim {args.cmd}: {exc}")


if __name__ == "__main__":
    run_cli()
