import numpy as np
import dmi_copy as dc

SIZE = 4


def solidImage(rgba, size=SIZE):
    img = np.zeros((size, size, 4), dtype=np.uint8)
    img[:, :] = rgba
    return img


def makeState(name, rgba=(255, 0, 0, 255), dirs=1, frames=1, delay=None, size=SIZE):
    images = []
    for f in range(frames):
        for d in range(dirs):
            # shade every (frame, dir) cell differently so layout bugs show up
            r, g, b, a = rgba
            images.append(solidImage(((r + 10 * f) % 256, (g + 20 * d) % 256, b, a), size))
    if delay is None and frames > 1:
        delay = [1] * frames
    return dc.IconState(name, images, dirs=dirs, frames=frames, delay=delay)


def makeIcon(states, size=SIZE):
    return dc.Icon(width=size, height=size, states=states)


def writeDmi(path, icon):
    with open(path, "wb") as f:
        icon.save(f)


def readDmi(path):
    with open(path, "rb") as f:
        return dc.load(f)
