"""futari - 二人暮らしのシフトと家事分担の同期コア"""

__version__ = "0.1.0"
