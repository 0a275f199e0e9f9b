# viz/network_view.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np
import pygame as pg

from training.network import DenseNetwork


# -----------------------
# View config (single spot)
# -----------------------
@dataclass
class ViewStyle:
    canvas_bg_rgba: tuple[int, int, int, int] = (0, 0, 0, 0)

    # Node look
    node_radius: int = 24
    node_fill: tuple[int, int, int] = (220, 220, 220)
    node_border: tuple[int, int, int] = (100, 100, 100)
    node_border_width: int = 2

    # Layout
    margin_ratio_x: float = 0.12
    margin_ratio_y: float = 0.12

    # Edge look
    edge_neutral_gray: tuple[int, int, int] = (180, 180, 180)
    edge_color_neg: tuple[int, int, int] = (255, 0, 0)   # -1
    edge_color_pos: tuple[int, int, int] = (0, 200, 0)   # +1
    edge_min_width: int = 1
    edge_max_width: int = 4

    # Text (node values)
    font_name: str | None = None
    font_size: int = 20
    text_color: tuple[int, int, int] = (130, 130, 30)
    value_decimals: int = 3
    show_values: bool = True


class NetworkView(pg.sprite.Sprite):
    """
    Sprite picture of a DenseNetwork: one column of nodes per entry in
    `network.shape`, edges coloured red (negative) to green (positive) and
    thickened by |weight| relative to the layer's largest weight. Bias
    columns are not drawn.
    """
    def __init__(self, network: DenseNetwork, canvas_size: tuple[int, int], style: ViewStyle | None = None):
        super().__init__()
        self.network = network
        self.style = style or ViewStyle()

        self.image = pg.Surface(canvas_size, pg.SRCALPHA)
        self.rect = self.image.get_rect(topleft=(0, 0))
        if not pg.font.get_init():
            pg.font.init()
        self.font = pg.font.SysFont(self.style.font_name, self.style.font_size)

        self.node_centers = self._compute_node_centers(canvas_size, network.shape)
        self.node_values: Optional[List[np.ndarray]] = None

        self.redraw()

    # ---------- Public API ----------
    def set_node_values(self, values_by_layer: Optional[List[np.ndarray]]) -> None:
        """
        One array per entry of network.shape (see DenseNetwork.activations).
        Pass None to hide values.
        """
        if values_by_layer is not None:
            if len(values_by_layer) != len(self.network.shape):
                raise ValueError("node_values length must match number of layers")
            for arr, expected in zip(values_by_layer, self.network.shape):
                if len(arr) != expected:
                    raise ValueError("node_values per layer must match layer size")
        self.node_values = values_by_layer
        self.redraw()

    def show_input(self, x) -> None:
        self.set_node_values(self.network.activations(x))

    def redraw(self) -> None:
        self.image.fill(self.style.canvas_bg_rgba)
        self._draw_edges()
        self._draw_nodes(with_values=self.style.show_values)

    # ---------- Layout ----------
    def _compute_node_centers(self, canvas_size: tuple[int, int], layer_sizes: List[int]) -> List[List[Tuple[int, int]]]:
        width, height = canvas_size
        margin_x = self.style.margin_ratio_x * width
        margin_y = self.style.margin_ratio_y * height

        num_layers = len(layer_sizes)
        if num_layers == 1:
            xs = [width // 2]
        else:
            xs = [int(margin_x + i * (width - 2 * margin_x) / (num_layers - 1)) for i in range(num_layers)]

        centers: List[List[Tuple[int, int]]] = []
        for layer_index, node_count in enumerate(layer_sizes):
            if node_count == 1:
                ys = [height // 2]
            else:
                ys = [int(margin_y + j * (height - 2 * margin_y) / (node_count - 1)) for j in range(node_count)]
            centers.append([(xs[layer_index], y) for y in ys])
        return centers

    # ---------- Edges ----------
    def weight_to_color(self, weight_value: float) -> tuple[int, int, int]:
        """Map weight in [-1,1] to red (neg) -> gray (0) -> green (pos)."""
        w = float(np.clip(weight_value, -1.0, 1.0))
        if w < 0:
            t = w + 1.0
            lo, hi = self.style.edge_color_neg, self.style.edge_neutral_gray
        else:
            t = w
            lo, hi = self.style.edge_neutral_gray, self.style.edge_color_pos
        return tuple(int((1 - t) * a + t * b) for a, b in zip(lo, hi))  # type: ignore[return-value]

    def _edge_width(self, abs_weight: float, layer_max_abs: float) -> int:
        if layer_max_abs <= 0:
            return self.style.edge_min_width
        t = float(np.clip(abs_weight / layer_max_abs, 0.0, 1.0))
        return int(self.style.edge_min_width + t * (self.style.edge_max_width - self.style.edge_min_width))

    def _draw_edges(self) -> None:
        for layer_index, layer in enumerate(self.network.layers):
            # rows = target nodes, columns = source nodes + bias
            w_all = layer.get_weights()[:, :-1]
            layer_max_abs = float(np.abs(w_all).max()) if w_all.size else 0.0
            sources = self.node_centers[layer_index]
            targets = self.node_centers[layer_index + 1]
            for src_idx, src in enumerate(sources):
                for tgt_idx, tgt in enumerate(targets):
                    w = float(w_all[tgt_idx, src_idx])
                    pg.draw.line(self.image, self.weight_to_color(w), src, tgt,
                                 self._edge_width(abs(w), layer_max_abs))

    # ---------- Nodes ----------
    def _draw_nodes(self, with_values: bool = True) -> None:
        for layer_index, centers in enumerate(self.node_centers):
            for node_index, (cx, cy) in enumerate(centers):
                pg.draw.circle(self.image, self.style.node_fill, (cx, cy), self.style.node_radius)
                pg.draw.circle(self.image, self.style.node_border, (cx, cy), self.style.node_radius,
                               width=self.style.node_border_width)

                if with_values and self.node_values is not None:
                    values = self.node_values[layer_index]
                    text = f"{float(values[node_index]):.{self.style.value_decimals}f}"
                    surf = self.font.render(text, True, self.style.text_color)
                    self.image.blit(surf, surf.get_rect(center=(cx, cy)))

    def draw(self, surface: pg.Surface) -> None:
        surface.blit(self.image, self.rect)
