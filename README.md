# sparsemcmc

This package provides sparse linear algebra in compressed-column form. It also
provides the samplers and densities used to fit Bayesian generalised linear
mixed models by MCMC.

## What is inside

- `sparsemcmc.csc` defines `CscMatrix` and `TripletMatrix`.
  - `CscMatrix` offers `from_dense`, `to_dense`, `transpose`, `multiply` and
    `norm` (the 1-norm).
  - It also offers `gaxpy`, `sum_duplicates`, `fkeep`, `droptol`, `dropzeros`,
    `permute` and `format`.
  - `TripletMatrix.entry` appends entries.
  - `load_triplet` reads whitespace-separated `row col value` triples from a
    text stream.
  - Invalid input raises `SparseError`.
- `sparsemcmc.perm` has `cumsum`, `pinv`, `pvec` and `ipvec`.
- `sparsemcmc.etree` has `etree`, `postorder`, `column_counts`, `ereach` and
  `symmetric_permute`.
- `sparsemcmc.triangular` has:
  - the dense-vector triangular solves `lsolve`, `ltsolve`, `usolve` and
    `utsolve`;
  - the sparse `reach` and `spsolve`;
  - the rank-one Cholesky update and downdate `updown`.
- `sparsemcmc.matching` has `randperm` and `maxtrans` (maximum transversal).
- `sparsemcmc.dmperm` has `scc` (strongly connected components) and `dmperm`
  (Dulmage–Mendelsohn decomposition). Both return a `Decomposition`.
- `sparsemcmc.householder` has `house` and `happly`.
- `sparsemcmc.build` builds sparse matrices:
  - `dense` and `zeros` build dense blocks.
  - `direct_sum` and `omega` build block-diagonal matrices.
  - `kronecker_a`, `kronecker_da`, `kronecker_di`, `kronecker_i` and
    `kronecker_si` build Kronecker products.
  - `direct_sum`, `omega`, `kronecker_a`, `kronecker_i` and `kronecker_si` each
    have an in-place `*_update` companion, which refreshes the values and keeps
    the pattern.
  - `kronecker_i_add` adds a weighted product in place.
  - `sort_dense_vector` and `cov2cor` modify a matrix in place.
- `sparsemcmc.inverse` inverts by Gauss–Jordan elimination with a condition
  check:
  - `invert` returns the inverse.
  - `invert_with_determinant` returns the inverse and the product of the pivots.
  - A singular matrix raises `SingularMatrixError`.
  - An ill-conditioned matrix raises `IllConditionedError`.
- `sparsemcmc.schur` has `schur`, which returns a Schur complement and the
  regression coefficients.
- `sparsemcmc.truncnorm` has `rtnorm` and `rtnorm_many`, which draw from
  truncated normals.
- `sparsemcmc.mvnorm` has:
  - the multivariate and conditional normal log densities `dmvnorm` and
    `dcmvnorm`;
  - `pcmvnorm` (interval probability);
  - the truncated conditional draws `rtcmvnorm` and `rtcmvnorm_many`.
- `sparsemcmc.pkk` has `pkk` and `pkk_update`. They give the probability that
  every category occurs in a multinomial sample.
- `sparsemcmc.cutpoints` has `dcutpoints`, the log acceptance ratio for ordinal
  cut-point proposals.
- `sparsemcmc.pedigree` has two functions:
  - `inverse_a` returns the inverse relationship matrix, the inbreeding
    coefficients and the Mendelian variances.
  - `breeding_values` simulates breeding values.
- `sparsemcmc.wishart` has these samplers:
  - `rwishart` and `rinvwishart`;
  - the conditional inverse Wishart samplers `rcinvwishart` and `rsinvwishart`;
  - `rcorr`, a Metropolis–Hastings correlation update;
  - `rrsub_invwishart`;
  - `riw`, which makes batches of draws.
- `sparsemcmc.antedependence` has `rante` and `simulate_ante`, which draw
  antedependence covariance matrices.

## Example

```python
import numpy as np
from sparsemcmc.csc import CscMatrix
from sparsemcmc.inverse import invert
from sparsemcmc.wishart import rinvwishart

a = CscMatrix.from_dense([[2.0, 0.5], [0.5, 1.0]])
print(a.multiply(a.transpose(True)).to_dense())
print(invert(a).to_dense())

rng = np.random.default_rng(1)
sample = rinvwishart(a, 5.0, rng)
print(sample.to_dense())
```

Every random function takes an optional `numpy.random.Generator` as `rng`.
Pass one to make runs reproducible. Without one, a fresh generator is used.

## What it does not do

The package is a library only. It has no command-line program.

It has no sparse Cholesky, LU or QR factorisation and no fill-reducing
ordering. The samplers and conditional densities use dense numpy arrays for
their Cholesky factors and small inverses.

## Installing and testing

```
pip install .
pip install .[test]
pytest
```