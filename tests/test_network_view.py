# tests/test_network_view.py
import numpy as np
import pygame as pg
import pytest

from dense.activations import SIGMOID
from dense.init import constant_initializer
from training.network import build_network
from viz.network_view import NetworkView, ViewStyle


@pytest.fixture(scope="module", autouse=True)
def _pygame_session():
    pg.init()
    yield
    pg.quit()

@pytest.fixture
def view():
    net = build_network([2, 3, 1], SIGMOID, initializer=constant_initializer(0.5))
    return NetworkView(net, (400, 300), ViewStyle(show_values=True))

def _rgb(c):
    cc = pg.Color(c)
    return (cc.r, cc.g, cc.b)

def test_view_is_sprite(view):
    assert isinstance(view, pg.sprite.Sprite)
    assert isinstance(view.image, pg.Surface)
    assert view.image.get_size() == (400, 300)

def test_node_centers_follow_network_shape(view):
    assert [len(c) for c in view.node_centers] == [2, 3, 1]
    # output layer has one node, centred vertically
    assert view.node_centers[-1][0][1] == 150

def test_weight_colors(view):
    assert view.weight_to_color(-1.0) == view.style.edge_color_neg
    assert view.weight_to_color(0.0) == view.style.edge_neutral_gray
    assert view.weight_to_color(1.0) == view.style.edge_color_pos
    assert view.weight_to_color(5.0) == view.style.edge_color_pos

def test_node_fill_drawn_at_centre(view):
    cx, cy = view.node_centers[0][0]
    assert _rgb(view.image.get_at((cx, cy))) == view.style.node_fill

def test_node_values_validated(view):
    with pytest.raises(ValueError):
        view.set_node_values([np.zeros(2)])
    with pytest.raises(ValueError):
        view.set_node_values([np.zeros(2), np.zeros(2), np.zeros(1)])
    view.set_node_values(None)
    assert view.node_values is None

def test_show_input_uses_activations(view):
    view.show_input([0.1, 0.2])
    assert [len(v) for v in view.node_values] == [2, 3, 1]

def test_draw_blits_onto_surface(view):
    screen = pg.Surface((400, 300), pg.SRCALPHA)
    screen.fill((10, 10, 10, 255))
    view.draw(screen)
    cx, cy = view.node_centers[1][1]
    assert screen.get_at((cx, cy)) != pg.Color(10, 10, 10, 255)
