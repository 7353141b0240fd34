"""
Tests for formula parsing and Design construction.
"""

import numpy as np
import pandas as pd
import pytest

from pylm import DataSource
from pylm.regression import Design, Formula, parse_formula
from pylm.regression.design import INTERCEPT_NAME
from pylm.core.exceptions import (
    DimensionError,
    DimensionMismatchError,
    InsufficientDegreesOfFreedomError,
    ValidationError,
)


class TestParseFormula:

    def test_single_predictor(self):
        f = parse_formula('mpg ~ disp')
        assert f == Formula(response='mpg', terms=('disp',), intercept=True)
        assert f.names == (INTERCEPT_NAME, 'disp')

    def test_whitespace_insensitive(self):
        assert parse_formula('mpg~disp+wt') == parse_formula('  mpg ~ disp  +  wt ')

    @pytest.mark.parametrize('formula', [
        'mpg ~ disp - 1',
        'mpg ~ disp + 0',
        'mpg ~ 0 + disp',
        'mpg ~ -1 + disp',
    ])
    def test_intercept_removed(self, formula):
        f = parse_formula(formula)
        assert not f.intercept
        assert f.names == ('disp',)

    def test_explicit_intercept(self):
        assert parse_formula('mpg ~ 1 + disp').names == (INTERCEPT_NAME, 'disp')

    def test_intercept_only(self):
        f = parse_formula('mpg ~ 1')
        assert f.terms == ()
        assert f.names == (INTERCEPT_NAME,)

    def test_term_removal(self):
        assert parse_formula('mpg ~ disp + wt - disp').terms == ('wt',)

    def test_duplicate_terms_collapsed(self):
        assert parse_formula('mpg ~ wt + wt').terms == ('wt',)

    @pytest.mark.parametrize('formula, match', [
        ('mpg disp', "exactly one '~'"),
        ('mpg ~ disp ~ wt', "exactly one '~'"),
        (' ~ disp', 'no response'),
        ('mpg ~ ', 'no right-hand side'),
        ('mpg ~ disp +', 'dangling'),
        ('mpg ~ disp * wt', 'unsupported'),
        ('mpg ~ log(disp)', 'unsupported'),
        ('mpg ~ disp:wt', 'unsupported'),
        ('mpg ~ 0', 'no parameters'),
    ])
    def test_malformed(self, formula, match):
        with pytest.raises(ValidationError, match=match):
            parse_formula(formula)

    def test_non_string(self):
        with pytest.raises(ValidationError, match='must be a string'):
            parse_formula(42)


class TestFromArrays:

    def test_shapes_and_names(self, simple_regression_data):
        X, y, _ = simple_regression_data
        design = Design.from_arrays(X, y, names=['a', 'b', 'c'], response_name='z')
        assert (design.n, design.p) == (100, 3)
        assert design.names == ('a', 'b', 'c')
        assert design.response_name == 'z'
        assert design.formula is None

    def test_1d_X_is_single_column(self):
        design = Design.from_arrays([1.0, 2.0, 4.0], [1.0, 2.0, 3.0])
        assert design.X.shape == (3, 1)

    def test_read_only(self, simple_regression_data):
        X, y, _ = simple_regression_data
        design = Design.from_arrays(X, y)
        with pytest.raises(ValueError):
            design.X[0, 0] = 5.0
        with pytest.raises(ValueError):
            design.y[0] = 5.0

    def test_name_count_mismatch(self, simple_regression_data):
        X, y, _ = simple_regression_data
        with pytest.raises(DimensionError, match='2 names for 3'):
            Design.from_arrays(X, y, names=['a', 'b'])

    def test_no_columns(self):
        with pytest.raises(DimensionError, match='no columns'):
            Design.from_arrays(np.empty((5, 0)), np.ones(5))

    def test_length_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            Design.from_arrays(np.ones((4, 1)), np.ones(5))

    def test_insufficient_df(self):
        with pytest.raises(InsufficientDegreesOfFreedomError, match='need n > p'):
            Design.from_arrays(np.eye(3), np.ones(3))

    def test_string_data_rejected(self):
        with pytest.raises(ValidationError):
            Design.from_arrays([['a', 'b']] * 4, np.ones(4))

    def test_describe(self, simple_regression_data):
        X, y, _ = simple_regression_data
        assert repr(Design.from_arrays(X, y)) == 'Design(X[100x3], y[100])'


class TestFromFormula:

    def test_dataframe(self, mtcars):
        design = Design.from_formula('mpg ~ disp + wt', mtcars)
        assert design.names == (INTERCEPT_NAME, 'disp', 'wt')
        assert design.response_name == 'mpg'
        np.testing.assert_array_equal(design.X[:, 0], 1.0)
        np.testing.assert_array_equal(design.X[:, 2], mtcars['wt'].to_numpy())
        np.testing.assert_array_equal(design.y, mtcars['mpg'].to_numpy())

    def test_mapping(self):
        data = {'y': [1.0, 2.0, 2.5, 4.0], 'x': [0.0, 1.0, 2.0, 3.0]}
        design = Design.from_formula('y ~ x - 1', data)
        assert design.names == ('x',)
        assert design.X.shape == (4, 1)

    def test_datasource(self, mtcars_path):
        ds = DataSource.from_file(mtcars_path, columns=['mpg', 'hp'])
        assert Design.from_formula('mpg ~ hp', ds).n == 32

    def test_unused_text_column_ignored(self):
        df = pd.DataFrame({
            'name': ['a', 'b', 'c', 'd'],
            'y': [1.0, 2.0, 2.5, 4.0],
            'x': [0.0, 1.0, 2.0, 3.0],
        })
        design = Design.from_formula('y ~ x', df)
        assert design.names == (INTERCEPT_NAME, 'x')

    def test_mapping_unused_text_column_ignored(self):
        data = {'label': ['p', 'q', 'r'], 'y': [1.0, 2.0, 4.0], 'x': [0.0, 1.0, 3.0]}
        assert Design.from_formula('y ~ x', data).n == 3

    def test_unknown_column_named_before_conversion(self):
        df = pd.DataFrame({'name': ['a', 'b', 'c'], 'y': [1.0, 2.0, 3.0]})
        with pytest.raises(ValidationError, match="unknown column 'x'"):
            Design.from_formula('y ~ x', df)

    def test_unknown_column(self, mtcars):
        with pytest.raises(ValidationError, match="unknown column 'cyl'"):
            Design.from_formula('mpg ~ cyl', mtcars)

    def test_unsupported_data(self):
        with pytest.raises(ValidationError, match='data must be'):
            Design.from_formula('y ~ x', [[1.0, 2.0]])

    def test_ragged_columns(self):
        data = {'y': [1.0, 2.0, 3.0, 4.0], 'x': [1.0, 2.0, 3.0]}
        with pytest.raises(DimensionMismatchError):
            Design.from_formula('y ~ x', data)

    def test_non_numeric_column(self):
        df = pd.DataFrame({'y': [1.0, 2.0, 3.0], 'g': ['a', 'b', 'c']})
        with pytest.raises(ValidationError, match='not numeric'):
            Design.from_formula('y ~ g', df)

    def test_describe(self, mtcars):
        assert Design.from_formula('mpg~disp', mtcars).describe() == 'mpg ~ disp'
        assert Design.from_formula('mpg ~ disp - 1', mtcars).describe() == 'mpg ~ disp - 1'


class TestFromDatasource:

    def test_X_and_y(self, simple_regression_data):
        X, y, _ = simple_regression_data
        design = Design.from_datasource(DataSource.from_arrays(X=X, y=y))
        assert design.names == ('x0', 'x1', 'x2')
        np.testing.assert_array_equal(design.X, X)

    def test_named_columns_with_intercept(self, mtcars):
        ds = DataSource.from_dataframe(mtcars)
        design = Design.from_datasource(ds, x=['wt'], y='mpg', add_intercept=True)
        assert design.names == (INTERCEPT_NAME, 'wt')

    def test_all_other_columns(self, mtcars):
        ds = DataSource.from_dataframe(mtcars)
        design = Design.from_datasource(ds, y='mpg')
        assert design.names == ('disp', 'hp', 'wt')

    def test_single_predictor_string(self, mtcars):
        ds = DataSource.from_dataframe(mtcars)
        assert Design.from_datasource(ds, x='hp', y='mpg').p == 1
