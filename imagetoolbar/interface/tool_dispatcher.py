class ToolDispatcher:
    """
   Lightweight router for canvas mouse events.

   Accepts any matplotlib canvas (anything exposing mpl_connect /
   mpl_disconnect). Handlers receive the raw matplotlib MouseEvent; the
   active tool registers temporary handlers, long-lived behaviour (pixel
   info, expand axes) registers permanent ones. Temporary handlers win.
   """
    def __init__(self, canvas):
        self.canvas = canvas
        # permanent
        self._perm_click = None
        self._perm_right = None
        self._perm_motion = None
        self._perm_release = None

        # temporary (tool)
        self._tmp_click = None
        self._tmp_right = None
        self._tmp_motion = None
        self._tmp_release = None
        # bind shims
        self._cids = [
            canvas.mpl_connect("button_press_event", self._shim_press),
            canvas.mpl_connect("motion_notify_event", self._shim_motion),
            canvas.mpl_connect("button_release_event", self._shim_release),
        ]

    # setters: temporary (default) or permanent
    def set_single_click(self, func, *, temporary=True):
        if temporary:
            self._tmp_click = func
        else:
            self._perm_click = func
    def set_right_click(self, func, *, temporary=True):
        if temporary:
            self._tmp_right = func
        else:
            self._perm_right = func
    def set_motion(self, func, *, temporary=True):
        if temporary:
            self._tmp_motion = func
        else:
            self._perm_motion = func
    def set_release(self, func, *, temporary=True):
        if temporary:
            self._tmp_release = func
        else:
            self._perm_release = func

    @property
    def temporary_click(self):
        return self._tmp_click

    @property
    def permanent_click(self):
        return self._perm_click

    def clear_perm_click(self): self._perm_click = None

    def clear_all_temp(self):
        self._tmp_click = self._tmp_right = self._tmp_motion = self._tmp_release = None

    # clear all and unhook from the canvas for teardown
    def clear(self):
        self._perm_click = self._perm_right = self._perm_motion = None
        self._perm_release = None
        self.clear_all_temp()
        for cid in self._cids:
            self.canvas.mpl_disconnect(cid)
        self._cids = []

    # shims prefer temp, then perm; right clicks also fire outside the axes
    def _shim_press(self, event):
        if event.button == 3:
            f = self._tmp_right or self._perm_right
        elif event.button == 1 and event.inaxes is not None:
            f = self._tmp_click or self._perm_click
        else:
            return
        if callable(f): f(event)
    def _shim_motion(self, event):
        f = self._tmp_motion or self._perm_motion
        if callable(f): f(event)
    def _shim_release(self, event):
        f = self._tmp_release or self._perm_release
        if callable(f): f(event)
