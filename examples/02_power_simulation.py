"""
Power Simulation Example
========================

This example estimates the power of one fixed analysis protocol by
re-running it on freshly simulated datasets.
"""

from rdfanalysis import RDFAnalysis
from rdfanalysis.progress import PrintReporter
from rdfanalysis.stats import simulate_confounded_data
from rdfanalysis.steps import EstimateModel

print("=" * 60)
print("POWER SIMULATION EXAMPLE")
print("=" * 60)

# 1. Design and settings
analysis = (
    RDFAnalysis([EstimateModel()], name="controlled regression")
    .set_seed(2137)
    .set_replications(300)
    .set_alpha(0.05)
    .set_progress(PrintReporter(label="Power"))
)

# 2. Power of the controlled protocol across sample sizes and effects
result = analysis.find_power(
    protocol={"control_for_z": "yes"},
    input_generator=simulate_confounded_data,
    parameter_grid={
        "sample_size": [25, 50, 100, 200, 400],
        "effect": [0.1, 0.2, 0.3],
    },
    true_value="effect",
)

# 3. Power curve with the 80% target
analysis.plot_power_curve(result, x="sample_size", group="effect")

# 4. Same question for the naive protocol: high "power", poor coverage
print("\nNaive protocol (no control for z):")
naive = analysis.find_power(
    protocol=["no"],
    input_generator=simulate_confounded_data,
    parameter_grid={"sample_size": [100], "effect": [0.2]},
    true_value="effect",
)

# 5. Parallel execution gives the same numbers
print("\nParallel run (same seed, same results):")
analysis.set_parallel(True, n_cores=2).set_progress(None)
parallel = analysis.find_power(
    protocol=["yes"],
    input_generator=simulate_confounded_data,
    parameter_grid={"sample_size": [100], "effect": [0.2]},
    print_results=False,
)
print(parallel["summary"].round(3))
