"""
conftest.py
~~~~~~~~~~~

Shared fixtures: model payloads and the containers built from them.
"""

import copy
import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from nrx_runtime.codec import encode_payload


SCENARIO_PAYLOAD = {
    'task': 'regression',
    'loss_function': 'mse',
    'epoch': 10,
    'batch_size': 4,
    'optimizer': 'sgd',
    'learning_rate': 0.01,
    'input_size': 3,
    'output_size': 2,
    'num_layers': 1,
    'weights': [[[1, 0], [0, 1], [1, 1]]],
    'biases': [[0, 0]],
    'layers': [
        {'layer_name': 'input_layer', 'layer_size': 3},
        {
            'layer_name': 'connected_layer',
            'activation_function_name': 'relu',
            'layer_size': 2
        }
    ]
}


def _classifier_payload():
    rng = np.random.default_rng(0)
    return {
        'task': 'classification',
        'loss_function': 'categorical_cross_entropy',
        'epoch': 200,
        'batch_size': 16,
        'optimizer': 'adam',
        'learning_rate': 0.001,
        'input_size': 4,
        'output_size': 3,
        'num_layers': 3,
        'weights': [
            rng.normal(size=(4, 5)).tolist(),
            [],
            rng.normal(size=(5, 3)).tolist()
        ],
        'biases': [
            rng.normal(size=5).tolist(),
            [],
            rng.normal(size=3).tolist()
        ],
        'layers': [
            {'layer_name': 'input_layer', 'layer_size': 4},
            {
                'layer_name': 'connected_layer',
                'activation_function_name': 'ReLU',
                'layer_size': 5
            },
            {'layer_name': 'flatten_layer'},
            {
                'layer_name': 'connected_layer',
                'activation_function_name': 'softmax',
                'layer_size': 3
            }
        ]
    }


@pytest.fixture
def scenario_payload():
    """Single relu layer: 3 inputs, 2 outputs, identity-like weights."""
    return copy.deepcopy(SCENARIO_PAYLOAD)


@pytest.fixture
def scenario_container(scenario_payload):
    return encode_payload(scenario_payload)


@pytest.fixture
def classifier_payload():
    """4 -> relu(5) -> flatten -> softmax(3) with random parameters."""
    return _classifier_payload()


@pytest.fixture
def classifier_container(classifier_payload):
    return encode_payload(classifier_payload)


@pytest.fixture
def model_file(tmp_path, classifier_container):
    """Classifier container written to a temporary .nrx file."""
    path = tmp_path / "classifier.nrx"
    path.write_bytes(classifier_container)
    return str(path)
