"""SIPSim: CO2 mass transfer into Solvent Impregnated Polymers (SIPs).

This package provides:
- Kinetics and properties: Arrhenius/van't Hoff laws, CO2 correlations
- Films: closed-form reaction-diffusion in SIP films and particles
- Uptake: transient uptake series (Crank, Danckwerts)
- MECS: encapsulated solvent particles with shell resistance
- Monolith: coated-channel contactors and their mass-transfer zone
- PDE: method-of-lines reaction-diffusion with stiff ODE integration
- Analytics: parameter sweeps, regime maps, diffusivity fitting
"""

__version__ = "0.1.0"
