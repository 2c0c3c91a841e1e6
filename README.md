# gennprojects

Tools for driving a set of spiking neural network example projects: a
Hodgkin-Huxley population fitted to a voltage-clamp recording by a genetic
algorithm, a sparsely connected Izhikevich network, and three variants of an
insect mushroom body model (`MBody1`, `MBody_delayedSyn`,
`MBody_individualID`).

The package does two jobs:

* **Run chains.** Each command writes the header file the model build reads,
  builds the model, generates connectivity and input files where the project
  needs them, creates the output directory and starts the compiled simulator.
  The location of the code generator is taken from the `GENN_PATH`
  environment variable. If a step fails, the command prints the failed call
  and returns exit status 1.
* **Model helpers in Python.** Network descriptions of the mushroom body and
  sparse Izhikevich models, the state, input and output handling of the
  Izhikevich network (`IzhNetwork`) and the mushroom body file readers,
  writers and input-pattern schedule (`Classol`).

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Commands

### Hodgkin-Huxley voltage clamp with a genetic algorithm

```
genn-hhvclamp-run <CPU=0, GPU=1> <protocol> <nPop> <totalT> <outdir> <debug mode? (0/1)>
```

Writes `NPOP` and `TOTALT` into
`$GENN_PATH/userproject/include/HHVClampParameters.h`, builds the `HHVClamp`
model, creates `<outdir>_output` and runs `model/VClampGA <outdir> <which> <protocol>`.

### Sparse Izhikevich network

```
genn-izh-sparse-run <CPU=0, GPU=1> <nNeurons> <nConn> <gscale> <outdir> <model name> <debug mode? (0/1)> <ftype FLOAT or DOUBLE> <use previous connectivity? (0/1)>
```

Splits the neurons into excitatory (four fifths, rounded up) and inhibitory
populations, creates `<outdir>_output` and `inputfiles`, runs
`gen_syns_sparse_izhModel` unless told to reuse connectivity, reads the
largest number of connections per neuron from each `indInG` file, writes
`sizes.h`, builds the model and runs `model/Izh_sim_sparse`.

### Mushroom body models

```
genn-mbody-run <CPU=0, AUTO GPU=1, GPU n= "n+2"> <nAL> <nMB> <nLHI> <nLb> <gscale> <outdir> <model name> <debug mode? (0/1)> <ftype DOUBLE or FLOAT> <reuse input&connectivity? 0/1>
```

Writes `sizes.h`, builds the model, creates `<outdir>_output`, runs the PN-KC,
KC-DN and PN-LHI synapse generators and `gen_input_structured` unless inputs
are reused, and runs `model/classol_sim`. The model name selects the variant:
`MBody_individualID` uses `gen_pnkc_syns_indivID` and adds `gPNKC_GLOBAL` to
the header; any other name follows the `MBody1` rules.

With debug mode 1 the build is made in debug form and the simulator is
started under `cuda-gdb` (or `devenv /debugexe` on Windows).

## Using the helpers from Python

```python
import io

import numpy as np

from gennprojects.classol import Classol
from gennprojects.izh_sparse import IzhNetwork
from gennprojects.mbody_models import Sizes, mbody1_model

sizes = Sizes(n_al=100, n_mb=1000, n_lhi=20, n_lb=100)
model = mbody1_model(sizes)
print(model.neuron_index("KC"), model.cumulative_sizes())

classol = Classol(sizes)
classol.generate_baserates()
classol.run(10.0, lambda rates, offset, t: None)

net = IzhNetwork(800, 200, rng=np.random.default_rng(1))
net.initialize_all_vars()
net.create_input_values()
out = io.StringIO()
net.output_state(out)
```

Other modules:

* `gennprojects.formatting`: `format_number` and `scalar_defines`, used for
  the generated headers and command lines.
* `gennprojects.launcher`: `genn_path`, `build_command`, `simulator_command`,
  `ensure_output_dir` and `run_checked`, which raises `CommandFailed`.
* `gennprojects.hhvclamp_run`, `gennprojects.izh_sparse_run`,
  `gennprojects.mbody_run`: argument parsing, header text and the `main`
  functions behind the commands.

## What the package does not do

* It does not integrate neuron dynamics itself. `IzhNetwork.run` and
  `Classol.run` call a step function the caller supplies; the compiled
  simulators started by the commands do the real work.
* It has no Python model of the Hodgkin-Huxley voltage-clamp population or
  its genetic algorithm. `genn-hhvclamp-run` only writes the parameter header,
  builds the model and starts the external simulator.